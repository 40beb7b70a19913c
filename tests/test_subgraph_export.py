#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Tests for GFA subgraph materialization and the colour/coordinate tables.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging

import pytest

from graphtie.core.data_structures import ChainWindow, CoordinateRecord, OrientedNodeRef
from graphtie.io_utils.graph_io import parse_path_line
from graphtie.io_utils.subgraph_export import (
    ColorTable,
    CoordinateTable,
    GFALink,
    GFASegment,
    SubgraphWriter,
)


SEQUENCES = {1: "AAAA", 2: "CCCC", 3: "GGGG", 4: "TTTT"}


def _path(line):
    return parse_path_line(line)[1]


def _window(path_id, left, right, shared=1):
    return ChainWindow(path_id=path_id, left=left, right=right,
                       core_left=left, core_right=right, shared=shared)


def _lines(path):
    return path.read_text().splitlines()


class TestGFARecords:

    def test_segment_line(self):
        assert GFASegment(3, "GGGG", 4).to_gfa_line() == "S\t3\tGGGG\tLN:i:4"

    def test_segment_placeholder(self):
        assert GFASegment(3, "", 4).to_gfa_line() == "S\t3\t*\tLN:i:4"

    def test_link_line(self):
        link = GFALink(OrientedNodeRef(1, '+'), OrientedNodeRef(2, '-'), 30)

        assert link.to_gfa_line() == "L\t1\t+\t2\t-\t30M"

    def test_reverse_complement_links_share_key(self):
        forward = GFALink(OrientedNodeRef(1, '+'), OrientedNodeRef(2, '-'), 0)
        reverse = GFALink(OrientedNodeRef(2, '+'), OrientedNodeRef(1, '-'), 0)
        other = GFALink(OrientedNodeRef(1, '+'), OrientedNodeRef(2, '+'), 0)

        assert forward.canonical_key() == reverse.canonical_key()
        assert forward.canonical_key() != other.canonical_key()


class TestSubgraphWriter:
    """Test segment de-duplication, link logging and finalization."""

    def test_writes_header_segments_links(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"
        nodes = _path("Q\t1+ 2+ 3+ 4+")

        with SubgraphWriter(out, SEQUENCES) as writer:
            writer.record(_window("Q", 0, 3), nodes)
            assert writer.finalize() == (3, 2)

        assert _lines(out) == [
            "H\tVN:Z:1.0",
            "S\t1\tAAAA\tLN:i:4",
            "S\t2\tCCCC\tLN:i:4",
            "S\t3\tGGGG\tLN:i:4",
            "L\t1\t+\t2\t+\t0M",
            "L\t2\t+\t3\t+\t0M",
        ]

    def test_segments_deduplicated_across_windows(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES) as writer:
            writer.record(_window("A", 0, 3), _path("A\t3+ 2+ 1+"))
            writer.record(_window("B", 0, 3), _path("B\t1+ 2+ 4+"))
            writer.record(_window("C", 0, 2), _path("C\t1- 2-"))
            writer.finalize()

        segments = [line for line in _lines(out) if line.startswith("S")]
        assert [line.split("\t")[1] for line in segments] == ["1", "2", "3", "4"]

    def test_links_deduplicated_by_orientation(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES) as writer:
            writer.record(_window("A", 0, 2), _path("A\t1+ 2+"))
            writer.record(_window("B", 0, 2), _path("B\t2- 1-"))
            writer.record(_window("C", 0, 2), _path("C\t1+ 2+"))
            writer.finalize()

        links = [line for line in _lines(out) if line.startswith("L")]
        assert links == ["L\t1\t+\t2\t+\t0M"]

    def test_kmer_overlap_on_links(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES, k=31) as writer:
            writer.record(_window("Q", 0, 2), _path("Q\t1+ 2-"))
            writer.finalize()

        assert _lines(out)[-1] == "L\t1\t+\t2\t-\t30M"

    def test_single_node_window(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES) as writer:
            writer.record(_window("Q", 1, 2), _path("Q\t1+ 2+ 3+"))
            assert writer.finalize() == (1, 0)

        assert _lines(out) == ["H\tVN:Z:1.0", "S\t2\tCCCC\tLN:i:4"]

    def test_no_windows_header_only(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES) as writer:
            writer.finalize()

        assert _lines(out) == ["H\tVN:Z:1.0"]

    def test_missing_node_skipped(self, temp_output_dir, caplog):
        """The segment and every link touching the missing node are left out."""
        out = temp_output_dir / "out.gfa"

        with caplog.at_level(logging.WARNING):
            with SubgraphWriter(out, SEQUENCES) as writer:
                writer.record(_window("Q", 0, 3), _path("Q\t1+ 77+ 2+"))
                assert writer.finalize() == (2, 0)

        assert writer.missing_nodes == [77]
        assert writer.links_dropped == 2
        assert "77" in caplog.text
        assert _lines(out)[1:] == ["S\t1\tAAAA\tLN:i:4", "S\t2\tCCCC\tLN:i:4"]

    def test_sequence_placeholders(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"
        sequences = {1: "A" * 10, 2: "C" * 3}

        with SubgraphWriter(out, sequences, max_inline_sequence=5) as writer:
            writer.record(_window("Q", 0, 2), _path("Q\t1+ 2+"))
            writer.finalize()

        assert _lines(out)[1:3] == ["S\t1\t*\tLN:i:10", "S\t2\tCCC\tLN:i:3"]

    def test_exclude_sequences(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with SubgraphWriter(out, SEQUENCES, include_sequence=False, gfa_version="1.1") as writer:
            writer.record(_window("Q", 0, 1), _path("Q\t1+"))
            writer.finalize()

        assert _lines(out) == ["H\tVN:Z:1.1", "S\t1\t*\tLN:i:4"]

    def test_link_log_removed_after_finalize(self, temp_output_dir):
        tmp_dir = temp_output_dir / "tmp"

        with SubgraphWriter(temp_output_dir / "out.gfa", SEQUENCES, tmp_dir=tmp_dir) as writer:
            assert writer.link_log_path.parent == tmp_dir
            assert writer.link_log_path.exists()
            writer.record(_window("Q", 0, 2), _path("Q\t1+ 2+"))
            writer.finalize()

        assert not writer.link_log_path.exists()
        assert list(tmp_dir.iterdir()) == []

    def test_link_log_removed_on_failure(self, temp_output_dir):
        out = temp_output_dir / "out.gfa"

        with pytest.raises(RuntimeError):
            with SubgraphWriter(out, SEQUENCES) as writer:
                writer.record(_window("Q", 0, 2), _path("Q\t1+ 2+"))
                raise RuntimeError("scan failed")

        assert not writer.link_log_path.exists()
        assert not out.exists()

    def test_record_after_finalize_rejected(self, temp_output_dir):
        with SubgraphWriter(temp_output_dir / "out.gfa", SEQUENCES) as writer:
            writer.finalize()
            with pytest.raises(RuntimeError):
                writer.record(_window("Q", 0, 1), _path("Q\t1+"))

    def test_finalize_twice_rejected(self, temp_output_dir):
        with SubgraphWriter(temp_output_dir / "out.gfa", SEQUENCES) as writer:
            writer.finalize()
            with pytest.raises(RuntimeError):
                writer.finalize()


class TestColorTable:

    def test_unique_pairs_ordered_by_node(self, temp_output_dir):
        colors = ColorTable()
        colors.add_window(_window("B", 0, 2), _path("B\t2+ 1+"))
        colors.add_window(_window("A", 0, 2), _path("A\t1+ 2+"))
        colors.add_window(_window("B", 0, 1), _path("B\t1+"))

        out = temp_output_dir / "colors.tsv"
        assert colors.write(out) == 4
        assert _lines(out) == ["1\tB", "1\tA", "2\tB", "2\tA"]
        assert colors.paths_for(1) == ["B", "A"]
        assert len(colors) == 4

    def test_only_window_nodes_coloured(self):
        colors = ColorTable()
        colors.add_window(_window("Q", 1, 2), _path("Q\t1+ 2+ 3+"))

        assert colors.paths_for(1) == []
        assert colors.paths_for(2) == ["Q"]


class TestCoordinateTable:

    def test_rows_appended(self, temp_output_dir):
        out = temp_output_dir / "coords.tsv"

        with CoordinateTable(out) as table:
            table.write(CoordinateRecord("Q", 3, 3, 1, 12))
            table.write(CoordinateRecord("R", 2, 3, 5, 20))

        assert table.rows == 2
        assert _lines(out) == ["Q\t3\t3\t1\t12", "R\t2\t3\t5\t20"]

    def test_partial_table_removed_on_failure(self, temp_output_dir):
        out = temp_output_dir / "coords.tsv"

        with pytest.raises(ValueError):
            with CoordinateTable(out) as table:
                table.write(CoordinateRecord("Q", 3, 3, 1, 12))
                raise ValueError("scan failed")

        assert not out.exists()
