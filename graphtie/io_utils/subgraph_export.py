#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Subgraph Export — GFA materialization of accepted chain windows, node
colour table, and per-window coordinate table.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence
from dataclasses import dataclass

from ..core.coordinates import kmer_overlap
from ..core.data_structures import (
    ChainWindow,
    CoordinateRecord,
    MissingNode,
    OrientedNodeRef,
)

logger = logging.getLogger(__name__)

DEFAULT_GFA_VERSION = "1.0"
DEFAULT_MAX_INLINE_SEQUENCE = 100000


# ============================================================================
#                           GFA RECORDS
# ============================================================================

@dataclass
class GFASegment:
    """Represents a GFA S-line (segment)."""
    node_id: int
    sequence: str
    length: int

    def to_gfa_line(self) -> str:
        """
        Convert to GFA S-line format.

        Format: S <id> <sequence> LN:i:<length>

        An empty sequence is written as the '*' placeholder.
        """
        seq_str = self.sequence if self.sequence else '*'
        return f"S\t{self.node_id}\t{seq_str}\tLN:i:{self.length}"


@dataclass
class GFALink:
    """Represents a GFA L-line (link/edge)."""
    from_node: OrientedNodeRef
    to_node: OrientedNodeRef
    overlap: int

    def to_gfa_line(self) -> str:
        """
        Convert to GFA L-line format.

        Format: L <from> <from_orient> <to> <to_orient> <overlap>M
        """
        return (
            f"L\t{self.from_node.node_id}\t{self.from_node.orientation}"
            f"\t{self.to_node.node_id}\t{self.to_node.orientation}\t{self.overlap}M"
        )

    def canonical_key(self) -> tuple:
        """
        Orientation-independent identity of the link.

        ``a+ -> b-`` and its reverse complement ``b+ -> a-`` describe the
        same adjacency and share a key.
        """
        forward = (self.from_node.node_id, self.from_node.orientation,
                   self.to_node.node_id, self.to_node.orientation)
        rev_from, rev_to = self.to_node.flipped(), self.from_node.flipped()
        reverse = (rev_from.node_id, rev_from.orientation,
                   rev_to.node_id, rev_to.orientation)
        return min(forward, reverse)


# ============================================================================
#                       SUBGRAPH WRITER
# ============================================================================

class SubgraphWriter:
    """
    Accumulate accepted windows and materialize them as one GFA file.

    Segments are collected in memory as a de-duplicated id set. Links are
    streamed to a temporary link log as windows arrive and copied into the
    output after the segments by ``finalize()``, which is called exactly once.
    The link log is removed even if finalization fails.

    Duplicate links are rejected against an in-memory set of compact
    orientation-canonical keys, one per distinct link. The log keeps the
    formatted lines out of memory; the key set still grows with the number
    of distinct links in the subgraph.
    """

    def __init__(
        self,
        output_path: str | Path,
        sequences: dict[int, str],
        k: int = 0,
        tmp_dir: str | Path | None = None,
        gfa_version: str = DEFAULT_GFA_VERSION,
        include_sequence: bool = True,
        max_inline_sequence: int = DEFAULT_MAX_INLINE_SEQUENCE
    ):
        """
        Initialize subgraph writer.

        Args:
            output_path: Path of the GFA file to create
            sequences: Node id -> sequence mapping
            k: K-mer size; links carry ``k - 1`` bases of overlap
            tmp_dir: Directory for the link log (default: output directory)
            gfa_version: Value of the VN header tag
            include_sequence: If False, write '*' for every segment
            max_inline_sequence: Longer sequences are written as '*'
        """
        self.output_path = Path(output_path)
        self.sequences = sequences
        self.overlap = kmer_overlap(k)
        self.gfa_version = gfa_version
        self.include_sequence = include_sequence
        self.max_inline_sequence = max_inline_sequence

        self.observed_segments: set[int] = set()
        self.missing_nodes: list[int] = []
        self.links_written = 0
        self.links_dropped = 0
        self.segments_written = 0
        self._seen_links: set[tuple] = set()
        self._finalized = False

        tmp_dir = Path(tmp_dir) if tmp_dir else self.output_path.parent
        tmp_dir.mkdir(parents=True, exist_ok=True)
        self._link_log = tempfile.NamedTemporaryFile(
            mode='w', dir=tmp_dir, prefix='graphtie_links_', suffix='.txt', delete=False
        )
        self.link_log_path = Path(self._link_log.name)
        logger.debug(f"Link log: {self.link_log_path}")

    def __enter__(self) -> SubgraphWriter:
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._finalized:
            self.discard()
        return False

    def record(self, window: ChainWindow, nodes: Sequence[OrientedNodeRef]) -> None:
        """
        Add one accepted window.

        Every node of ``nodes[window.left:window.right]`` becomes a segment and
        every adjacent pair becomes a link; repeats are recorded once. Links
        touching a node without a sequence are dropped, since its segment
        line will be skipped.

        Args:
            window: Accepted, context-widened window
            nodes: Oriented nodes of the path the window belongs to
        """
        if self._finalized:
            raise RuntimeError("record() called after finalize()")

        chain = nodes[window.left:window.right]
        for node in chain:
            self.observed_segments.add(node.node_id)

        for prev, node in zip(chain, chain[1:]):
            link = GFALink(from_node=prev, to_node=node, overlap=self.overlap)
            key = link.canonical_key()
            if key in self._seen_links:
                continue
            self._seen_links.add(key)
            if prev.node_id not in self.sequences or node.node_id not in self.sequences:
                # Endpoint has no segment line
                self.links_dropped += 1
                continue
            self._link_log.write(link.to_gfa_line() + "\n")
            self.links_written += 1

    def _segment(self, node_id: int) -> GFASegment:
        sequence = self.sequences.get(node_id)
        if sequence is None:
            raise MissingNode(node_id)

        shown = sequence
        if not self.include_sequence or len(sequence) > self.max_inline_sequence:
            shown = ''
        return GFASegment(node_id=node_id, sequence=shown, length=len(sequence))

    def finalize(self) -> tuple[int, int]:
        """
        Write header, segments (ascending node id) and logged links.

        Returns:
            (segments written, links written)
        """
        if self._finalized:
            raise RuntimeError("finalize() called twice")
        self._finalized = True

        logger.info(f"Writing subgraph GFA: {self.output_path}")
        try:
            self._link_log.close()
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, 'w') as f:
                f.write(f"H\tVN:Z:{self.gfa_version}\n")

                for node_id in sorted(self.observed_segments):
                    try:
                        segment = self._segment(node_id)
                    except MissingNode as e:
                        logger.warning(f"{e}; segment skipped")
                        self.missing_nodes.append(node_id)
                        continue
                    f.write(segment.to_gfa_line() + "\n")
                    self.segments_written += 1

                logger.info("Copying links to output file...")
                with open(self.link_log_path) as links:
                    for line in links:
                        f.write(line)
        finally:
            self._remove_link_log()

        logger.info(f"GFA export complete: {self.output_path}")
        logger.info(f"  Segments: {self.segments_written}")
        logger.info(f"  Links: {self.links_written}")
        if self.links_dropped:
            logger.warning(f"  {self.links_dropped} link(s) to missing segments dropped")
        return self.segments_written, self.links_written

    def discard(self) -> None:
        """Drop the link log without writing any output."""
        self._finalized = True
        self._link_log.close()
        self._remove_link_log()

    def _remove_link_log(self) -> None:
        try:
            os.remove(self.link_log_path)
        except FileNotFoundError:
            pass


# ============================================================================
#                    COLOUR AND COORDINATE TABLES
# ============================================================================

class ColorTable:
    """
    Node provenance: which paths used each node inside an accepted window.

    Accumulated in memory for the whole run and written once, one
    ``node<TAB>path`` row per distinct pair, ordered by node id and then by
    first observation.
    """

    def __init__(self):
        # dict values keep first-seen order of path ids
        self._colors: dict[int, dict[str, None]] = {}

    def add_window(self, window: ChainWindow, nodes: Sequence[OrientedNodeRef]) -> None:
        for node in nodes[window.left:window.right]:
            self._colors.setdefault(node.node_id, {})[window.path_id] = None

    def paths_for(self, node_id: int) -> list[str]:
        return list(self._colors.get(node_id, {}))

    def __len__(self) -> int:
        return sum(len(paths) for paths in self._colors.values())

    def write(self, output_path: str | Path) -> int:
        """
        Write the colour table.

        Returns:
            Number of rows written
        """
        output_path = Path(output_path)
        logger.info(f"Writing node colours: {output_path}")
        rows = 0
        with open(output_path, 'w') as f:
            for node_id in sorted(self._colors):
                for path_id in self._colors[node_id]:
                    f.write(f"{node_id}\t{path_id}\n")
                    rows += 1
        return rows


class CoordinateTable:
    """
    Append-only writer for per-window coordinate records.

    Rows are written as windows are accepted. If the run fails before the
    context exits cleanly, the partial table is removed.
    """

    def __init__(self, output_path: str | Path):
        self.output_path = Path(output_path)
        self.rows = 0
        self._handle = open(self.output_path, 'w')
        logger.info(f"Writing window coordinates: {self.output_path}")

    def __enter__(self) -> CoordinateTable:
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.discard()
        return False

    def write(self, record: CoordinateRecord) -> None:
        self._handle.write(record.to_tsv_line() + "\n")
        self.rows += 1

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    def discard(self) -> None:
        """Close and delete a partially written table."""
        self.close()
        try:
            os.remove(self.output_path)
        except FileNotFoundError:
            pass
        logger.info(f"Removed incomplete coordinate table: {self.output_path}")
