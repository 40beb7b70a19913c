#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Core data structures for subgraph extraction.

Defines the oriented node references that make up a path, the resolved
target window, the chain windows produced by the matcher, the per-window
coordinate records, and the error taxonomy shared by every stage.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


# ============================================================================
# Error Taxonomy
# ============================================================================

class GraphtieError(Exception):
    """Base class for all extraction errors."""
    pass


class ParseError(GraphtieError):
    """Raised when a graph or node file line is malformed."""

    def __init__(self, message: str, source: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.source = source
        self.line_number = line_number
        if source is not None and line_number is not None:
            message = f"{source}:{line_number}: {message}"
        super().__init__(message)


class TargetNotFound(GraphtieError):
    """Raised when the target path identifier is absent from the graph file."""

    def __init__(self, target_id: str, graph_file: str):
        self.target_id = target_id
        self.graph_file = graph_file
        super().__init__(f"Target path '{target_id}' not found in {graph_file}")


class RangeError(GraphtieError):
    """Raised when the requested target range falls outside the target path."""

    def __init__(self, start: int, stop: int, length: int):
        self.start = start
        self.stop = stop
        self.length = length
        super().__init__(
            f"Invalid target range [{start}, {stop}) for path of {length} nodes"
        )


class MissingNode(GraphtieError):
    """Raised when a path references a node absent from the node store."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"Node {node_id} not present in node store")


class IndexNotReached(GraphtieError):
    """Raised when a coordinate projection index lies beyond the path."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} never reached in path of {length} nodes")


# ============================================================================
# Path Elements
# ============================================================================

FORWARD = '+'
REVERSE = '-'
ORIENTATIONS = (FORWARD, REVERSE)

# Node ids are unsigned 64-bit integers
MAX_NODE_ID = 2**64 - 1


@dataclass(frozen=True)
class OrientedNodeRef:
    """
    A node id paired with a traversal orientation.

    Serialized as the decimal id immediately followed by the sign,
    e.g. ``12+`` or ``7-``.
    """
    node_id: int
    orientation: str

    def flipped(self) -> 'OrientedNodeRef':
        """Return the same node traversed in the opposite direction."""
        other = REVERSE if self.orientation == FORWARD else FORWARD
        return OrientedNodeRef(self.node_id, other)

    def __str__(self) -> str:
        return f"{self.node_id}{self.orientation}"


@dataclass(frozen=True)
class TargetWindow:
    """
    The requested slice ``[start, stop)`` of the target path.

    Attributes:
        path_id: Identifier of the target path
        start: First node index included
        stop: First node index excluded
        node_ids: Ordered node ids inside the slice
    """
    path_id: str
    start: int
    stop: int
    node_ids: Tuple[int, ...]
    node_set: FrozenSet[int] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'node_set', frozenset(self.node_ids))

    def __len__(self) -> int:
        return len(self.node_ids)


class ChainPolicy(Enum):
    """
    Where the scan resumes after a window is accepted.

    GREEDY resumes at the unwidened right edge of the accepted window, so
    overlapping sub-chains inside an accepted region are never re-reported.
    OVERLAPPING resumes one position after the accepted start and reports
    every qualifying start position.
    """
    GREEDY = 'greedy'
    OVERLAPPING = 'overlapping'


@dataclass(frozen=True)
class ChainWindow:
    """
    Context-extended half-open window ``[left, right)`` on a streamed path.

    Attributes:
        path_id: Identifier of the path the window was found on
        left: First position included (after context widening)
        right: First position excluded (after context widening)
        core_left: Accepted start before widening
        core_right: Accepted end before widening
        shared: Distinct target nodes inside the unwidened window
    """
    path_id: str
    left: int
    right: int
    core_left: int
    core_right: int
    shared: int

    def __len__(self) -> int:
        return self.right - self.left


@dataclass(frozen=True)
class CoordinateRecord:
    """Genomic placement of one accepted window on its path."""
    path_id: str
    shared: int
    target_size: int
    start: int
    stop: int

    def to_tsv_line(self) -> str:
        """Format as a coordinate table row."""
        return f"{self.path_id}\t{self.shared}\t{self.target_size}\t{self.start}\t{self.stop}"


@dataclass
class ExtractionSummary:
    """Counters reported at the end of an extraction run."""
    paths_scanned: int = 0
    windows_accepted: int = 0
    segments_written: int = 0
    links_written: int = 0
    links_dropped: int = 0
    missing_nodes: List[int] = field(default_factory=list)
    coordinates_omitted: int = 0

    def to_dict(self) -> dict:
        """Counters in report order, with missing nodes as a count."""
        return {
            'paths_scanned': self.paths_scanned,
            'windows_accepted': self.windows_accepted,
            'segments_written': self.segments_written,
            'links_written': self.links_written,
            'links_dropped': self.links_dropped,
            'missing_nodes': len(self.missing_nodes),
            'coordinates_omitted': self.coordinates_omitted,
        }

# Graphtie v0.1.0
# Any usage is subject to this software's license.
