#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Tests for chain window discovery.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import numpy as np
import pytest

from graphtie.core.chain_matcher import (
    ChainMatcher,
    build_match_mask,
    find_chain_windows,
    minimum_shared_nodes,
)
from graphtie.core.data_structures import ChainPolicy, TargetWindow


def _target(*node_ids):
    return TargetWindow(path_id="T", start=0, stop=len(node_ids), node_ids=tuple(node_ids))


def _spans(windows):
    return [(w.left, w.right) for w in windows]


class TestThreshold:

    def test_floor_of_fraction(self):
        assert minimum_shared_nodes(3, 0.5) == 1
        assert minimum_shared_nodes(3, 1.0) == 3
        assert minimum_shared_nodes(10, 0.25) == 2

    def test_zero_fraction(self):
        assert minimum_shared_nodes(5, 0.0) == 0


class TestMatchMask:

    def test_mask_marks_target_positions(self):
        mask = build_match_mask([1, 5, 3, 1], np.array([1, 2, 3]))

        assert mask.tolist() == [True, False, True, True]


class TestChainMatcher:
    """Test window acceptance, widening and scan resumption."""

    def test_exact_match(self):
        """Target {1,2,3}, full fraction: one window over the shared run."""
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=1.0)

        windows = matcher.windows_for_path("Q", [1, 2, 3, 4])

        assert _spans(windows) == [(0, 3)]
        assert windows[0].shared == 3
        assert windows[0].path_id == "Q"

    def test_partial_match_accepted(self):
        """Two of three target nodes satisfy a 0.5 fraction."""
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=0.5)

        windows = matcher.windows_for_path("Q", [1, 5, 3])

        assert _spans(windows) == [(0, 3)]
        assert windows[0].shared == 2

    def test_no_shared_nodes(self):
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=0.5)

        assert matcher.windows_for_path("Q", [9, 8]) == []

    def test_empty_path(self):
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=0.5)

        assert matcher.windows_for_path("Q", []) == []

    def test_repeated_node_not_double_counted(self):
        """Positional hits pass but only one distinct target node is present."""
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=1.0)

        assert matcher.windows_for_path("Q", [1, 1, 1, 9]) == []

    def test_threshold_below_fraction_rejected(self):
        matcher = ChainMatcher(_target(1, 2, 3, 4), min_fraction=0.75)

        assert matcher.windows_for_path("Q", [1, 9, 9, 4, 9]) == []

    def test_context_widening(self):
        matcher = ChainMatcher(_target(3, 4), min_fraction=1.0, context_size=1)

        windows = matcher.windows_for_path("Q", [1, 2, 3, 4, 5, 6])

        assert _spans(windows) == [(1, 5)]
        assert (windows[0].core_left, windows[0].core_right) == (2, 4)
        assert len(windows[0]) == 4

    def test_context_clamped_to_path(self):
        matcher = ChainMatcher(_target(3), min_fraction=1.0, context_size=10)

        windows = matcher.windows_for_path("Q", [9, 9, 3, 9, 9])

        assert _spans(windows) == [(0, 5)]

    def test_window_clipped_at_path_end(self):
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=0.34)

        windows = matcher.windows_for_path("Q", [7, 7, 3])

        assert _spans(windows) == [(2, 3)]

    def test_greedy_skips_to_unwidened_edge(self):
        matcher = ChainMatcher(_target(1, 2), min_fraction=0.5, context_size=1)

        windows = matcher.windows_for_path("Q", [1, 2, 1, 2])

        assert [(w.core_left, w.core_right) for w in windows] == [(0, 2), (2, 4)]
        assert _spans(windows) == [(0, 3), (1, 4)]

    def test_overlapping_policy_reports_every_start(self):
        matcher = ChainMatcher(_target(1, 2), min_fraction=0.5,
                               policy=ChainPolicy.OVERLAPPING)

        windows = matcher.windows_for_path("Q", [1, 2, 1, 2])

        assert [w.core_left for w in windows] == [0, 1, 2, 3]

    def test_earliest_start_wins(self):
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=0.67)

        windows = matcher.windows_for_path("Q", [2, 9, 1, 2, 3])

        # [2, 9, 1] shares 2 of 3 distinct target nodes and is taken first
        assert [(w.core_left, w.core_right) for w in windows] == [(0, 3), (3, 5)]

    def test_window_invariants(self):
        rng = np.random.default_rng(7)
        target = _target(*range(10, 20))
        matcher = ChainMatcher(target, min_fraction=0.3, context_size=2)

        for trial in range(50):
            path = rng.integers(5, 25, size=int(rng.integers(0, 40))).tolist()
            for w in matcher.windows_for_path(f"P{trial}", path):
                assert 0 <= w.left <= w.core_left < w.core_right <= w.right <= len(path)
                assert w.shared <= min(len(target.node_set), w.core_right - w.core_left)
                assert w.shared >= matcher.n_abs

    def test_invalid_fraction(self):
        with pytest.raises(ValueError):
            ChainMatcher(_target(1), min_fraction=1.5)

    def test_negative_context(self):
        with pytest.raises(ValueError):
            ChainMatcher(_target(1), min_fraction=0.5, context_size=-1)


class TestFindChainWindows:

    def test_plain_set_target(self):
        windows = list(find_chain_windows("Q", [4, 5, 6], {5, 6}, 2, 2))

        assert _spans(windows) == [(1, 3)]

    def test_ids_above_signed_range(self):
        big = 2**63 + 5
        matcher = ChainMatcher(_target(big, 2**64 - 1), min_fraction=1.0)

        windows = matcher.windows_for_path("Q", [1, big, 2**64 - 1])

        assert _spans(windows) == [(1, 3)]


class TestScan:
    """Test streaming a whole graph file."""

    def test_scan_yields_windows_with_nodes(self, make_graph):
        graph = make_graph("Q\t1+ 2- 3+ 4+", "R\t9+ 8+")
        matcher = ChainMatcher(_target(1, 2, 3), min_fraction=1.0)

        results = list(matcher.scan(graph))

        assert [w.path_id for w, _ in results] == ["T", "Q"]
        window, nodes = results[1]
        assert [str(n) for n in nodes[window.left:window.right]] == ["1+", "2-", "3+"]
        assert matcher.paths_scanned == 3
