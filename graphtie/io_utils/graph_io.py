#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Graph and node file I/O for Graphtie.

Handles the two inputs of an extraction run:
- Node files: one ``id<TAB>sequence`` record per line
- Graph files: one ``path_id<TAB>12+ 7- 9+`` path per line

Both are streamed line by line and never held in memory in full.
Files ending in ``.gz``/``.gzip`` are decompressed transparently.
"""

# =============================================================================
# SECTION 1: IMPORTS AND DEPENDENCIES
# =============================================================================

import gzip
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union

from ..core.data_structures import (
    MAX_NODE_ID,
    ORIENTATIONS,
    OrientedNodeRef,
    ParseError,
    RangeError,
    TargetNotFound,
    TargetWindow,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 2: FILE UTILITIES
# =============================================================================

def is_gzipped(filepath: Union[str, Path]) -> bool:
    """
    Check if file is gzip compressed.

    Args:
        filepath: Path to file

    Returns:
        True if file is gzipped
    """
    filepath = Path(filepath)
    return filepath.suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt')
        else:
            return gzip.open(filepath, 'wt')
    else:
        return open(filepath, mode)


def _is_node_id(text: str) -> bool:
    """True for a decimal id that fits an unsigned 64-bit integer."""
    return text.isascii() and text.isdigit() and int(text) <= MAX_NODE_ID


def _split_record(line: str, source: str, line_number: int) -> Tuple[str, str]:
    """Split a record at its first tab into (key, remainder)."""
    key, sep, rest = line.partition('\t')
    if not sep:
        raise ParseError("missing tab separator", source, line_number)
    return key, rest


# =============================================================================
# SECTION 3: NODE STORE
# =============================================================================

def load_nodes(filepath: Union[str, Path]) -> Dict[int, str]:
    """
    Load the node id -> sequence mapping.

    Args:
        filepath: Path to the two-column node file

    Returns:
        Dictionary mapping node id to its sequence

    Raises:
        ParseError: If a line lacks a tab or its id is not an unsigned 64-bit integer
    """
    filepath = Path(filepath)
    source = str(filepath)
    sequences: Dict[int, str] = {}

    with open_file(filepath) as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.rstrip('\r\n')
            if not line:
                continue

            key, sequence = _split_record(line, source, line_number)
            if not _is_node_id(key):
                raise ParseError(f"invalid node id '{key}'", source, line_number)

            sequences[int(key)] = sequence

    logger.info(f"Loaded {len(sequences):,} node sequences from {filepath}")
    return sequences


# =============================================================================
# SECTION 4: PATH PARSING
# =============================================================================

def parse_oriented_node(token: str) -> OrientedNodeRef:
    """
    Parse a single ``<id><sign>`` path token.

    Args:
        token: Token such as ``12+`` or ``7-``

    Returns:
        OrientedNodeRef for the token

    Raises:
        ParseError: If the sign is missing or the id is not numeric

    Example:
        >>> parse_oriented_node("12+")
        OrientedNodeRef(node_id=12, orientation='+')
    """
    if len(token) < 2:
        raise ParseError(f"malformed node token '{token}'")

    digits, orientation = token[:-1], token[-1]
    if orientation not in ORIENTATIONS:
        raise ParseError(f"missing orientation in node token '{token}'")
    if not _is_node_id(digits):
        raise ParseError(f"invalid node id in token '{token}'")

    return OrientedNodeRef(int(digits), orientation)


def parse_path_line(line: str, source: Optional[str] = None,
                    line_number: Optional[int] = None) -> Tuple[str, List[OrientedNodeRef]]:
    """
    Parse one graph file line into its identifier and oriented nodes.

    Tokens are separated by single spaces; an empty remainder yields an
    empty path.
    """
    identifier, rest = _split_record(line, source, line_number)
    if not rest:
        return identifier, []

    try:
        nodes = [parse_oriented_node(token) for token in rest.split(' ')]
    except ParseError as e:
        raise ParseError(f"path '{identifier}': {e}", source, line_number) from e

    return identifier, nodes


def iter_paths(filepath: Union[str, Path]) -> Iterator[Tuple[str, List[OrientedNodeRef]]]:
    """
    Stream every path of a graph file.

    Args:
        filepath: Path to the graph file

    Yields:
        (path_id, oriented nodes) per non-blank line
    """
    filepath = Path(filepath)
    source = str(filepath)

    with open_file(filepath) as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.rstrip('\r\n')
            if not line:
                continue
            yield parse_path_line(line, source, line_number)


# =============================================================================
# SECTION 5: TARGET RESOLUTION
# =============================================================================

def find_target(
    filepath: Union[str, Path],
    target_id: str,
    start: int = 0,
    stop: Optional[int] = None
) -> TargetWindow:
    """
    Locate the target path and slice its node ids.

    The slice is half-open: ``start`` is included, ``stop`` is excluded,
    and ``stop=None`` runs to the end of the path. Only the target line is
    parsed; every other line is compared by identifier and skipped.

    Args:
        filepath: Path to the graph file
        target_id: Identifier of the target path
        start: First node index to include
        stop: First node index to exclude (None = end of path)

    Returns:
        TargetWindow holding the ordered node ids of the slice

    Raises:
        TargetNotFound: If no line carries ``target_id``
        RangeError: If the range is empty or exceeds the path
    """
    filepath = Path(filepath)
    source = str(filepath)

    with open_file(filepath) as handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.rstrip('\r\n')
            if not line:
                continue

            identifier, _ = _split_record(line, source, line_number)
            if identifier != target_id:
                continue

            logger.info(f"Target found: {target_id} (line {line_number})")
            _, nodes = parse_path_line(line, source, line_number)

            end = len(nodes) if stop is None else stop
            if start < 0 or end > len(nodes) or start >= end:
                raise RangeError(start, end, len(nodes))

            node_ids = tuple(node.node_id for node in nodes[start:end])
            logger.debug(f"Target window: {node_ids}")
            return TargetWindow(path_id=target_id, start=start, stop=end, node_ids=node_ids)

    raise TargetNotFound(target_id, source)
