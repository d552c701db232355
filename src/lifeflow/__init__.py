"""lifeflow - semantic-zoom layout engine for life timelines.

Converts timestamped events into a zoom-dependent, clustered and positioned
layout, and into a multi-person "river" view of shared moments.
"""

__version__ = "0.1.0"
