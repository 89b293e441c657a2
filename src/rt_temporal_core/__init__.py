"""
The temporal algebra: spans and span sets, bounding boxes and temporal values.

Every object is immutable. Operations that may find nothing, such as the intersection of two disjoint spans
or the restriction of a value to a time where it is not defined, return `None`.
"""
