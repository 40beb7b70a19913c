#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Graphtie v0.1.0

Resolved extraction settings — the validated, typed view of a configuration.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.data_structures import ChainPolicy
from .schema import ConfigValidationError, validate_config


@dataclass(frozen=True)
class ExtractionSettings:
    """
    Everything one extraction run needs, fully resolved.

    Attributes:
        graph_file: Graph file of paths to scan
        node_file: Node id -> sequence file
        target_id: Identifier of the target path
        start: First target node index included
        stop: First target node index excluded (None = end of path)
        min_fraction: Fraction of distinct target nodes a window must share
        context_size: Context nodes added on each side of a window
        policy: Scan resumption policy after an acceptance
        kmer_size: K-mer size of the graph (0 = no node overlap)
        output: Output GFA path
        tmp_dir: Directory for the temporary link log
        color_path: Colour table path (None = not written)
        coord_path: Coordinate table path (None = not written)
    """
    graph_file: Path
    node_file: Path
    target_id: str
    output: Path
    start: int = 0
    stop: Optional[int] = None
    min_fraction: float = 0.5
    context_size: int = 0
    policy: ChainPolicy = ChainPolicy.GREEDY
    kmer_size: int = 0
    tmp_dir: Optional[Path] = None
    color_path: Optional[Path] = None
    coord_path: Optional[Path] = None
    gfa_version: str = '1.0'
    include_sequence: bool = True
    max_inline_sequence: int = 100000
    log_level: str = 'INFO'
    log_file: Optional[Path] = None

    @property
    def write_colors(self) -> bool:
        return self.color_path is not None

    @property
    def write_coords(self) -> bool:
        return self.coord_path is not None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ExtractionSettings':
        """
        Build settings from a configuration dictionary.

        Args:
            config: Merged configuration (see ``DEFAULT_CONFIG``)

        Returns:
            ExtractionSettings

        Raises:
            ConfigValidationError: Listing every validation problem
        """
        errors = validate_config(config)
        if errors:
            raise ConfigValidationError(errors)

        target = config['target']
        matching = config['matching']
        graph = config['graph']
        output = config['output']

        def optional_path(value):
            return Path(value) if value else None

        colors = output.get('colors') or {}
        coords = output.get('coordinates') or {}
        logging_cfg = output.get('logging') or {}

        return cls(
            graph_file=Path(config['input']['graph_file']),
            node_file=Path(config['input']['node_file']),
            target_id=str(target['path_id']),
            start=target.get('start', 0),
            stop=target.get('stop'),
            min_fraction=float(matching['min_fraction']),
            context_size=matching['context_size'],
            policy=ChainPolicy(matching['policy']),
            kmer_size=graph['kmer_size'],
            gfa_version=str(graph.get('gfa_version', '1.0')),
            include_sequence=bool(graph.get('include_sequence', True)),
            max_inline_sequence=graph.get('max_inline_sequence', 100000),
            output=Path(output['gfa']),
            tmp_dir=optional_path(output.get('tmp_dir')),
            color_path=optional_path(colors.get('path')) if colors.get('enabled') else None,
            coord_path=optional_path(coords.get('path')) if coords.get('enabled') else None,
            log_level=str(logging_cfg.get('level', 'INFO')).upper(),
            log_file=optional_path(logging_cfg.get('log_file')),
        )
