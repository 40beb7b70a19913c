"""
Graphtie Extraction Pipeline.

Coordinates one subgraph extraction run:
- Target resolution: find the target path and slice the requested range
- Node loading: node id -> sequence store
- Chain matching: stream every path and accept target-sharing windows
- Materialization: GFA subgraph, optional colour and coordinate tables

The graph file is read twice (target resolution, then matching), always
streamed line by line. Nothing is written to the output GFA until every path
has been scanned.
"""

from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Sequence
import logging

from ..config.settings import ExtractionSettings
from ..core.chain_matcher import ChainMatcher
from ..core.coordinates import project_coordinates
from ..core.data_structures import (
    ChainWindow,
    CoordinateRecord,
    ExtractionSummary,
    IndexNotReached,
    MissingNode,
    OrientedNodeRef,
    TargetWindow,
)
from ..io_utils.graph_io import find_target, load_nodes
from ..io_utils.subgraph_export import ColorTable, CoordinateTable, SubgraphWriter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[Path] = None):
    """
    Configure root logging with a console handler and an optional file handler.

    Args:
        level: Logging level name ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Additional log file (None = console only)
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )


class SubgraphPipeline:
    """
    Orchestrator for a single extraction run.

    Wires the target resolver, node store, chain matcher, coordinate
    projector and subgraph writer together according to the settings.
    """

    def __init__(self, settings: ExtractionSettings, configure_logging: bool = False):
        """
        Initialize extraction pipeline.

        Args:
            settings: Resolved extraction settings
            configure_logging: Install console/file log handlers from settings
        """
        self.settings = settings
        if configure_logging:
            setup_logging(settings.log_level, settings.log_file)
        self.logger = logging.getLogger(__name__)

        self.target: Optional[TargetWindow] = None
        self.sequences: dict = {}

    def run(self) -> ExtractionSummary:
        """
        Run the extraction.

        Returns:
            Summary counters for the run

        Raises:
            TargetNotFound, RangeError, ParseError: On fatal input problems
            OSError: If an input cannot be read or an output cannot be created
        """
        s = self.settings
        summary = ExtractionSummary()

        self.logger.info("=" * 60)
        self.logger.info("Starting Graphtie subgraph extraction")
        self.logger.info("=" * 60)

        self.target = find_target(s.graph_file, s.target_id, s.start, s.stop)
        self.logger.info(
            f"Target window {s.target_id}[{self.target.start}:{self.target.stop}] "
            f"({len(self.target)} nodes, {len(self.target.node_set)} distinct)"
        )

        self.sequences = load_nodes(s.node_file)

        matcher = ChainMatcher(
            self.target,
            s.min_fraction,
            context_size=s.context_size,
            policy=s.policy,
        )
        colors = ColorTable() if s.write_colors else None
        writer = SubgraphWriter(
            s.output,
            self.sequences,
            k=s.kmer_size,
            tmp_dir=s.tmp_dir,
            gfa_version=s.gfa_version,
            include_sequence=s.include_sequence,
            max_inline_sequence=s.max_inline_sequence,
        )

        with writer:
            coord_table = CoordinateTable(s.coord_path) if s.write_coords else nullcontext()
            with coord_table as coords:
                for window, nodes in matcher.scan(s.graph_file):
                    summary.windows_accepted += 1
                    writer.record(window, nodes)

                    if colors is not None:
                        colors.add_window(window, nodes)

                    if coords is not None:
                        record = self.locate_window(window, nodes)
                        if record is None:
                            summary.coordinates_omitted += 1
                        else:
                            coords.write(record)

                self.logger.info(f"Finalizing! ({matcher.paths_scanned:,} paths scanned)")
                summary.segments_written, summary.links_written = writer.finalize()

        if colors is not None:
            colors.write(s.color_path)

        summary.paths_scanned = matcher.paths_scanned
        summary.missing_nodes = list(writer.missing_nodes)
        summary.links_dropped = writer.links_dropped

        self.logger.info(f"Windows accepted: {summary.windows_accepted}")
        if summary.missing_nodes:
            self.logger.warning(f"{len(summary.missing_nodes)} segment(s) skipped for missing nodes")
        if summary.coordinates_omitted:
            self.logger.warning(f"{summary.coordinates_omitted} coordinate row(s) omitted")

        return summary

    def locate_window(self, window: ChainWindow,
                      nodes: Sequence[OrientedNodeRef]) -> Optional[CoordinateRecord]:
        """
        Project a window onto genomic coordinates of its path.

        Returns:
            CoordinateRecord, or None when the window cannot be projected
        """
        node_ids = [node.node_id for node in nodes]
        try:
            start, stop = project_coordinates(
                node_ids, window.left, window.right - 1, self.sequences, self.settings.kmer_size
            )
        except (IndexNotReached, MissingNode) as e:
            self.logger.warning(
                f"No coordinates for {window.path_id}[{window.left}:{window.right}]: {e}"
            )
            return None

        self.logger.debug(f"ID: {window.path_id}, from: {window.left}, to: {window.right}")
        return CoordinateRecord(
            path_id=window.path_id,
            shared=window.shared,
            target_size=len(self.target.node_set),
            start=start,
            stop=stop,
        )
