#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Pytest configuration and shared fixtures.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from graphtie.config.settings import ExtractionSettings


SCENARIO_NODES = "1\tAAAA\n2\tCCCC\n3\tGGGG\n"


def write_lines(path, lines):
    """Write lines to a file, one per line, and return the path."""
    path = Path(path)
    with open(path, 'w') as f:
        for line in lines:
            f.write(line + "\n")
    return path


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="graphtie_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def node_file(temp_output_dir):
    """Three 4bp nodes: 1=AAAA, 2=CCCC, 3=GGGG."""
    path = temp_output_dir / "nodes.seg"
    path.write_text(SCENARIO_NODES)
    return path


@pytest.fixture
def make_graph(temp_output_dir):
    """Factory writing a graph file whose first path is the target T = 1+ 2+ 3+."""
    def _make(*paths, name="graph.seq"):
        return write_lines(temp_output_dir / name, ["T\t1+ 2+ 3+", *paths])
    return _make


@pytest.fixture
def make_settings(temp_output_dir, node_file):
    """Factory for extraction settings over the scenario files."""
    def _make(graph_file, **overrides):
        options = dict(
            graph_file=graph_file,
            node_file=node_file,
            target_id="T",
            start=0,
            stop=3,
            min_fraction=1.0,
            context_size=0,
            kmer_size=0,
            output=temp_output_dir / "out.gfa",
        )
        options.update(overrides)
        return ExtractionSettings(**options)
    return _make

# Graphtie v0.1.0
# Any usage is subject to this software's license.
