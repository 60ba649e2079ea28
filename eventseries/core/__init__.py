"""
Core data structures for eventseries.

Contains the key types, the Event record, the canonical key index,
the persistent Collection with its mutation, transform and aggregation
operations, and the reducer library used by aggregation.
"""
