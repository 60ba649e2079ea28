"""
eventseries: immutable collections of time-keyed events.

Provides an ordered, key-indexed Collection of Events with key-based
dedup, structural transforms, stream processors (align, rate, collapse)
and a statistical aggregation and quantile engine.
"""

__version__ = "0.1.0"
