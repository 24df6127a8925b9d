"""Sample gating, per-body extraction and the bounded series store.

The pipeline owner lives in :mod:`.recorder` and is imported from there.
"""

from .extractor import FieldExtractor
from .overflow import DecimatePolicy, DropOldestPolicy, OverflowPolicy, make_overflow_policy
from .selector import SampleSelector, SelectorDecision
from .series import Absent, BodySeries, Sample, SeriesStore

__all__ = [
    "Absent",
    "BodySeries",
    "DecimatePolicy",
    "DropOldestPolicy",
    "FieldExtractor",
    "OverflowPolicy",
    "Sample",
    "SampleSelector",
    "SelectorDecision",
    "SeriesStore",
    "make_overflow_policy",
]
