"""
Graphtie v0.1.0

Core extraction data structures and algorithms.

The chain matcher streams graph files through ``graphtie.io_utils`` and is
imported from ``graphtie.core.chain_matcher`` directly.
"""

from .data_structures import (
    GraphtieError,
    ParseError,
    TargetNotFound,
    RangeError,
    MissingNode,
    IndexNotReached,
    OrientedNodeRef,
    TargetWindow,
    ChainPolicy,
    ChainWindow,
    CoordinateRecord,
    ExtractionSummary,
)
from .coordinates import kmer_overlap, project_coordinates

__all__ = [
    'GraphtieError',
    'ParseError',
    'TargetNotFound',
    'RangeError',
    'MissingNode',
    'IndexNotReached',
    'OrientedNodeRef',
    'TargetWindow',
    'ChainPolicy',
    'ChainWindow',
    'CoordinateRecord',
    'ExtractionSummary',
    'kmer_overlap',
    'project_coordinates',
]
