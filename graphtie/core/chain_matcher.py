#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Chain Matcher — streaming discovery of target-sharing windows.

Every path of the graph file is scanned left to right. Positions whose node
belongs to the target window are candidate chain starts; a candidate is
accepted when the target-length window starting there holds at least
``floor(|target set| * min_fraction)`` target positions AND as many distinct
target nodes. Accepted windows are widened by a fixed number of context nodes
on both sides and handed on, tagged with their path identifier.

The scan is a single greedy pass: ties go to the earliest start, and with the
default policy the cursor jumps to the unwidened right edge of each accepted
window so overlapping sub-chains are not reported twice.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from pathlib import Path
from typing import AbstractSet, Iterator, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from .data_structures import ChainPolicy, ChainWindow, OrientedNodeRef, TargetWindow
from ..io_utils.graph_io import iter_paths

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100_000


# ============================================================================
# Window Discovery
# ============================================================================

def minimum_shared_nodes(target_size: int, min_fraction: float) -> int:
    """
    Minimum target overlap a window needs to be accepted.

    Example:
        >>> minimum_shared_nodes(3, 0.5)
        1
    """
    return int(target_size * min_fraction)


def build_match_mask(node_ids: Sequence[int], target_ids: np.ndarray) -> np.ndarray:
    """
    Flag every path position whose node belongs to the target.

    Args:
        node_ids: Ordered node ids of the path
        target_ids: Sorted array of target node ids

    Returns:
        Boolean array, one entry per path position
    """
    ids = np.asarray(node_ids, dtype=np.uint64)
    return np.isin(ids, target_ids, assume_unique=False)


def find_chain_windows(
    path_id: str,
    node_ids: Sequence[int],
    target_set: AbstractSet[int],
    target_len: int,
    n_abs: int,
    context_size: int = 0,
    policy: ChainPolicy = ChainPolicy.GREEDY,
    target_ids: Optional[np.ndarray] = None
) -> Iterator[ChainWindow]:
    """
    Yield the accepted, context-widened windows of one path.

    Args:
        path_id: Identifier of the path being scanned
        node_ids: Ordered node ids of the path
        target_set: Distinct node ids of the target window
        target_len: Number of positions in the target window
        n_abs: Minimum positional and distinct overlap for acceptance
        context_size: Nodes of context added on each side
        policy: Where scanning resumes after an acceptance
        target_ids: Pre-sorted array of ``target_set`` (built if omitted)

    Yields:
        ChainWindow per accepted window, in order of start position
    """
    n = len(node_ids)
    if n == 0:
        return

    if target_ids is None:
        target_ids = np.fromiter(sorted(target_set), dtype=np.uint64, count=len(target_set))

    mask = build_match_mask(node_ids, target_ids)
    hits = np.flatnonzero(mask)
    if hits.size == 0:
        return

    # prefix[j] = number of matching positions in [0, j)
    prefix = np.concatenate(([0], np.cumsum(mask, dtype=np.int64)))
    cursor = 0

    for hit in hits:
        i = int(hit)
        if i < cursor:
            continue

        r = min(i + target_len, n)
        if int(prefix[r] - prefix[i]) < n_abs:
            continue

        shared = len(target_set.intersection(node_ids[i:r]))
        if shared < n_abs:
            continue

        left = max(i - context_size, 0)
        right = min(r + context_size, n)
        yield ChainWindow(
            path_id=path_id,
            left=left,
            right=right,
            core_left=i,
            core_right=r,
            shared=shared,
        )

        if policy is ChainPolicy.GREEDY:
            cursor = r


# ============================================================================
# Streaming Matcher
# ============================================================================

class ChainMatcher:
    """
    Scan a graph file for windows sharing nodes with a target window.

    Holds the read-only target set and the acceptance threshold, which is
    computed once from the target set size, and streams paths one at a time.
    """

    def __init__(
        self,
        target: TargetWindow,
        min_fraction: float,
        context_size: int = 0,
        policy: ChainPolicy = ChainPolicy.GREEDY
    ):
        """
        Initialize chain matcher.

        Args:
            target: Resolved target window
            min_fraction: Fraction of distinct target nodes a window must share
            context_size: Nodes of context added on each side of a window
            policy: Where scanning resumes after an acceptance
        """
        if not 0.0 <= min_fraction <= 1.0:
            raise ValueError(f"min_fraction must be within [0, 1], got {min_fraction}")
        if context_size < 0:
            raise ValueError(f"context_size must be >= 0, got {context_size}")

        self.target = target
        self.target_set = target.node_set
        self.target_len = len(target)
        self.min_fraction = min_fraction
        self.context_size = context_size
        self.policy = policy
        self.n_abs = minimum_shared_nodes(len(self.target_set), min_fraction)
        self.paths_scanned = 0

        self._target_ids = np.fromiter(
            sorted(self.target_set), dtype=np.uint64, count=len(self.target_set)
        )

        logger.info(
            f"Matching against {len(self.target_set)} distinct target nodes "
            f"(window {self.target_len}, need {self.n_abs} shared, "
            f"context {context_size}, policy {policy.value})"
        )

    def windows_for_path(self, path_id: str, node_ids: Sequence[int]) -> List[ChainWindow]:
        """Accepted windows of a single, already parsed path."""
        return list(find_chain_windows(
            path_id,
            node_ids,
            self.target_set,
            self.target_len,
            self.n_abs,
            context_size=self.context_size,
            policy=self.policy,
            target_ids=self._target_ids,
        ))

    def scan(self, graph_file: Union[str, Path]) -> Iterator[Tuple[ChainWindow, List[OrientedNodeRef]]]:
        """
        Stream the graph file and yield every accepted window.

        Args:
            graph_file: Path to the graph file

        Yields:
            (window, oriented nodes of the window's path)
        """
        for path_id, nodes in iter_paths(graph_file):
            self.paths_scanned += 1
            if self.paths_scanned % PROGRESS_INTERVAL == 0:
                logger.info(f"Scanned {self.paths_scanned:,} paths...")

            node_ids = [node.node_id for node in nodes]
            for window in self.windows_for_path(path_id, node_ids):
                logger.debug(
                    f"Accepted {path_id}[{window.left}:{window.right}] "
                    f"({len(window)} nodes, {window.shared} shared)"
                )
                yield window, nodes

# Graphtie v0.1.0
# Any usage is subject to this software's license.
