"""Click CLI commands for TopoBuilder."""

import logging
import pathlib
import sys

import click

from .builder import TerrainBuilder
from .config import ReconstructionConfig, tolerance_for_units
from .errors import TopoBuilderError
from .export import export, write_manifest, write_solid, write_surface
from .sources import read_points

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool, quiet: bool):
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level,
                        format='%(asctime)s - %(levelname)s - %(message)s')


def _config(tolerance, units, buffer, min_volume, workers, no_surface, order):
    config = ReconstructionConfig.from_env()
    changes = {}
    if tolerance is not None:
        changes['xy_tolerance'] = tolerance
    elif units:
        changes['xy_tolerance'] = tolerance_for_units(units)
    if buffer is not None:
        changes['extrusion_buffer'] = buffer
    if min_volume is not None:
        changes['min_volume'] = min_volume
    if workers is not None:
        changes['workers'] = workers
    if no_surface:
        changes['build_surface'] = False
    if order:
        changes['union_order'] = order
    return config.replace(**changes) if changes else config


@click.group()
def cli():
    """TopoBuilder CLI: terrain surfaces and solids from elevation points."""
    pass


@cli.command()
@click.argument('points', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='terrain.stl', help='Output solid file (STL, PLY, OBJ, 3MF, GLB)')
@click.option('--surface', default=None, help='Also write the triangulated surface to this file')
@click.option('--manifest', default=None, help='Write a JSON summary to this file')
@click.option('--tolerance', '-t', type=float, default=None, help='XY dedup tolerance')
@click.option('--units', default=None, help='Drawing units (mm selects a 0.1 tolerance)')
@click.option('--buffer', type=float, default=None, help='Extrusion buffer above the highest point')
@click.option('--min-volume', type=float, default=None, help='Volume floor for prisms and the solid')
@click.option('--workers', '-w', type=int, default=None, help='Threads used to build prisms')
@click.option('--order', type=click.Choice(['emission', 'centroid']), default=None,
              help='Union order of prisms')
@click.option('--no-surface', is_flag=True, help='Skip the visualization surface')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.option('--quiet', '-q', is_flag=True, help='Warnings and errors only')
def build(points, output, surface, manifest, tolerance, units, buffer,
          min_volume, workers, order, no_surface, verbose, quiet):
    """Build a watertight terrain solid from an XYZ point file."""
    _setup_logging(verbose, quiet)
    try:
        config = _config(tolerance, units, buffer, min_volume, workers,
                         no_surface, order)
        if surface and not config.build_surface:
            raise click.UsageError("--surface cannot be combined with --no-surface "
                                   "or TOPOBUILDER_NO_SURFACE")
        builder = TerrainBuilder(config, progress=sys.stderr.isatty() and not quiet)
        result = builder.reconstruct(read_points(points))

        write_solid(result.solid, output)
        if surface and result.surface is not None:
            write_surface(result.surface, surface)
        summary = result.summary()
        if manifest:
            summary['source'] = str(pathlib.Path(points))
            summary['output'] = str(output)
            write_manifest(summary, manifest)
    except TopoBuilderError as e:
        logger.error(f"Error building terrain: {e}")
        raise click.ClickException(str(e))

    click.echo(f"{'='*50}")
    click.echo(f"Points: {summary['raw_points']} raw, "
               f"{summary['unique_points']} unique")
    click.echo(f"Triangles: {summary['triangles']}, "
               f"prisms built: {summary['prisms_built']}")
    click.echo(f"Parts: {summary['merged_parts']} merged, "
               f"{summary['separate_parts']} separate")
    ok = '✓' if summary['valid'] else '✗'
    click.echo(f"[{ok}] Volume: {summary['volume']:.3f} → {output}")
    click.echo(f"{'='*50}")


@cli.command()
@click.argument('points', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default=None, help='Write the surface mesh to this file')
@click.option('--tolerance', '-t', type=float, default=None, help='XY dedup tolerance')
@click.option('--units', default=None, help='Drawing units (mm selects a 0.1 tolerance)')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def triangulate(points, output, tolerance, units, verbose):
    """Deduplicate and triangulate an XYZ point file."""
    _setup_logging(verbose, False)
    try:
        config = _config(tolerance, units, None, None, None, False, None)
        mesh = TerrainBuilder(config).triangulate(read_points(points))
        if output and mesh.triangles:
            write_surface(export(mesh), output)
    except TopoBuilderError as e:
        logger.error(f"Error triangulating points: {e}")
        raise click.ClickException(str(e))

    click.echo(f"{len(mesh.points)} unique points, {mesh.num_triangles} triangles")


def main():
    cli()


if __name__ == '__main__':
    main()
