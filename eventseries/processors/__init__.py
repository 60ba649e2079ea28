"""
Single-pass stateful stream processors.

Each processor consumes one Event at a time, in sequence order, and
emits zero or more output Events (alignment, rate of change, and
multi-field collapse).
"""
