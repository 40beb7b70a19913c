"""
Graphtie v0.1.0

I/O Module for Graphtie.

Module structure:
1. graph_io.py - Node file loading, path parsing and streaming, target resolution
2. subgraph_export.py - Subgraph GFA writer, colour and coordinate tables
"""

# Input parsing and streaming
from .graph_io import (
    is_gzipped,
    open_file,
    load_nodes,
    parse_oriented_node,
    parse_path_line,
    iter_paths,
    find_target,
)

# Subgraph export
from .subgraph_export import (
    GFASegment,
    GFALink,
    SubgraphWriter,
    ColorTable,
    CoordinateTable,
)

__all__ = [
    # Input
    'is_gzipped',
    'open_file',
    'load_nodes',
    'parse_oriented_node',
    'parse_path_line',
    'iter_paths',
    'find_target',
    # Export
    'GFASegment',
    'GFALink',
    'SubgraphWriter',
    'ColorTable',
    'CoordinateTable',
]
