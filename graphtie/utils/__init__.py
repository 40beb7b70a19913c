"""
Utilities module for Graphtie.

This module provides the run-level utilities:
- Extraction pipeline orchestration
- Logging setup
"""

from .pipeline import SubgraphPipeline, setup_logging

__all__ = [
    'SubgraphPipeline',
    'setup_logging',
]
