#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for Graphtie.

This module provides the main CLI entry point and all subcommands for
extracting target-sharing subgraphs from pangenome path files.
"""

import sys
from importlib import metadata
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import apply_overrides, load_config, save_config_template, validate_config
from .config.settings import ConfigValidationError, ExtractionSettings
from .core.data_structures import GraphtieError
from .utils.pipeline import SubgraphPipeline


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    Graphtie: target-anchored subgraph extraction

    Finds every path of a pangenome graph that shares a long enough run of
    nodes with a region of a reference path, and writes those runs as a
    smaller GFA graph.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='graphtie_config.yaml',
              help='Output configuration file path')
def config_init(output):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating configuration template: {output}")

    try:
        save_config_template(Path(output))
        click.echo(f"✓ Configuration file created: {output}")
        click.echo("\nEdit this file to set inputs, target region and thresholds.")
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except (ConfigValidationError, OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo("\nKey Settings:")
    click.echo(f"  Target: {config['target']['path_id']} "
               f"[{config['target']['start']}, {config['target']['stop']})")
    click.echo(f"  Min fraction: {config['matching']['min_fraction']}")
    click.echo(f"  Context: {config['matching']['context_size']} nodes")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except ConfigValidationError as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        sys.exit(1)
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nInputs:")
    click.echo(f"  Graph: {config['input']['graph_file']}")
    click.echo(f"  Nodes: {config['input']['node_file']}")

    click.echo("\nTarget:")
    click.echo(f"  Path: {config['target']['path_id']}")
    click.echo(f"  Range: [{config['target']['start']}, {config['target']['stop']})")

    click.echo("\nMatching:")
    click.echo(f"  Min fraction: {config['matching']['min_fraction']}")
    click.echo(f"  Context: {config['matching']['context_size']} nodes")
    click.echo(f"  Policy: {config['matching']['policy']}")
    click.echo(f"  K-mer size: {config['graph']['kmer_size']}")

    click.echo("\nOutput:")
    click.echo(f"  GFA: {config['output']['gfa']}")
    click.echo(f"  Colours: {config['output']['colors']['path'] if config['output']['colors']['enabled'] else 'off'}")
    click.echo(f"  Coordinates: {config['output']['coordinates']['path'] if config['output']['coordinates']['enabled'] else 'off'}")


# ============================================================================
# Extraction
# ============================================================================

@main.command()
@click.option('--config', 'config_file', type=click.Path(exists=True),
              help='YAML configuration file (command-line options take precedence)')
@click.option('--graph', '-g', 'graph_file', type=click.Path(exists=True),
              help='Path to graph file of node paths')
@click.option('--seq', '-s', 'seq_file', type=click.Path(exists=True),
              help='Path to node sequence file')
@click.option('--frac', '-n', 'node_fraction', type=float,
              help='Fraction of distinct target nodes a window must share')
@click.option('--target', '-i', 'target', type=str,
              help='Identifier of target path')
@click.option('--from', '-f', 'start', type=int,
              help='Start position on target path (0-based, included)')
@click.option('--to', '-t', 'stop', type=int,
              help='End position on target path (excluded)')
@click.option('--context', '-c', 'context', type=int,
              help='Context to include around each window, in nodes')
@click.option('--output', '-o', 'output', type=click.Path(),
              help='Output path to write GFA to')
@click.option('--tmp', '-m', 'tmp_dir', type=click.Path(),
              help='Directory for temporary files')
@click.option('--kmer', '-k', 'kmer', type=int,
              help='K-mer size of the graph (nodes overlap by k-1 bases)')
@click.option('--coords', '-y', is_flag=True,
              help='Write genomic coordinates of every window')
@click.option('--coord-path', '-p', type=click.Path(),
              help='Output path of the coordinate table')
@click.option('--colors', '-x', is_flag=True,
              help='Write node colours (node to path identifiers)')
@click.option('--color-path', '-a', type=click.Path(),
              help='Output path of the colour table')
@click.option('--policy', type=click.Choice(['greedy', 'overlapping']),
              help='Where scanning resumes after an accepted window')
@click.option('--no-sequence', is_flag=True,
              help="Write '*' instead of segment sequences")
@click.option('--log-file', type=click.Path(),
              help='Also write log messages to this file')
@click.pass_context
def extract(ctx, config_file, graph_file, seq_file, node_fraction, target, start, stop,
            context, output, tmp_dir, kmer, coords, coord_path, colors, color_path,
            policy, no_sequence, log_file):
    """
    Extract the subgraph of paths sharing nodes with a target region.

    Every path sharing at least FRAC of the distinct nodes of the target
    range contributes its matching window (plus context) to the output GFA.
    """
    overrides = {
        'input.graph_file': graph_file,
        'input.node_file': seq_file,
        'target.path_id': target,
        'target.start': start,
        'target.stop': stop,
        'matching.min_fraction': node_fraction,
        'matching.context_size': context,
        'matching.policy': policy,
        'graph.kmer_size': kmer,
        'graph.include_sequence': False if no_sequence else None,
        'output.gfa': output,
        'output.tmp_dir': tmp_dir,
        'output.coordinates.enabled': True if coords else None,
        'output.coordinates.path': coord_path,
        'output.colors.enabled': True if colors else None,
        'output.colors.path': color_path,
        'output.logging.log_file': log_file,
    }
    if ctx.obj.get('VERBOSE'):
        overrides['output.logging.level'] = 'DEBUG'
    elif ctx.obj.get('QUIET'):
        overrides['output.logging.level'] = 'WARNING'

    try:
        config = apply_overrides(load_config(Path(config_file) if config_file else None), overrides)
        settings = ExtractionSettings.from_config(config)
    except ConfigValidationError as e:
        click.echo("✗ Invalid extraction settings:", err=True)
        for error in e.errors:
            click.echo(f"  • {error}", err=True)
        ctx.exit(1)
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        ctx.exit(1)

    quiet = ctx.obj.get('QUIET')
    if not quiet:
        click.echo(f"Target: {settings.target_id} [{settings.start}, {settings.stop})")
        click.echo(f"Graph: {settings.graph_file}")
        click.echo(f"Output: {settings.output}")

    try:
        summary = SubgraphPipeline(settings, configure_logging=True).run()
    except GraphtieError as e:
        click.echo(f"✗ Extraction failed: {e}", err=True)
        ctx.exit(1)
    except OSError as e:
        click.echo(f"✗ I/O error: {e}", err=True)
        ctx.exit(1)

    if not quiet:
        click.echo(f"\n✓ Subgraph written: {settings.output}")
        for key, value in summary.to_dict().items():
            click.echo(f"  {key.replace('_', ' ').capitalize()}: {value:,}")
        if settings.write_coords:
            click.echo(f"  Coordinates: {settings.coord_path}")
        if settings.write_colors:
            click.echo(f"  Colours: {settings.color_path}")


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"Graphtie v{__version__}")
    click.echo("\nDependencies:")

    try:
        import numpy
        click.echo(f"  NumPy: {numpy.__version__}")
    except ImportError:
        click.echo("  NumPy: not installed")

    for package, label in [("click", "Click"), ("PyYAML", "PyYAML")]:
        try:
            click.echo(f"  {label}: {metadata.version(package)}")
        except metadata.PackageNotFoundError:
            click.echo(f"  {label}: not installed")


if __name__ == '__main__':
    sys.exit(main())
