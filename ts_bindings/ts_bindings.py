import json
import logging
import sys

import click

from .pipeline import DuplicateNameConflict, GenerationError, GeneratorConfig, ModuleLayout, OutputMode, PipelineGenerator
from .pipeline.analyzer import TypeRegistry
from .pipeline.config import EXPORT_DIR_ENV

logger = logging.getLogger(__name__)


@click.command()
@click.option("--type", "-t", "types", multiple=True, help="Export only these types (and their dependencies)")
@click.option("--export-dir", "-o", default=None, type=str, envvar=EXPORT_DIR_ENV, help="Export root, relative to --base-dir")
@click.option("--base-dir", "-b", default=None, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--flat", is_flag=True, default=False, help="Put every artifact directly under the export root")
@click.option("--force", is_flag=True, default=False, help="Overwrite existing files even if another type generated them")
@click.option("--esm", is_flag=True, default=False, help="Add a .js extension to import specifiers")
@click.option("--format", "format_", is_flag=True, default=False, help="Format artifacts with prettier when available")
@click.option("--stdout", is_flag=True, default=False, help="Print artifacts instead of writing them")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("feeds", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def ts_bindings(types, export_dir, base_dir, config, flat, force, esm, format_, stdout, verbose, feeds):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flags override the config file
    if export_dir:
        config.output.export_dir = export_dir
    if base_dir:
        config.output.base_dir = base_dir
    if flat:
        config.output.layout = ModuleLayout.FLAT
    if force:
        config.output.mode = OutputMode.FORCE
    if esm:
        config.output.import_extension = ".js"
    if format_:
        config.formatter.enabled = True

    registry = TypeRegistry()
    for feed in feeds:
        try:
            names = registry.register_feed(feed)
        except (OSError, ValueError) as e:
            raise click.ClickException(f"{feed}: {e}") from e
        logger.debug("Registered %d type(s) from %s", len(names), feed)

    codegen = PipelineGenerator(registry, config)

    if stdout:
        _print_artifacts(codegen, list(types) or registry.names())
        return

    try:
        report = codegen.export(list(types)) if types else codegen.export_all()
    except DuplicateNameConflict as e:
        raise click.ClickException(str(e)) from e

    for path in report.written:
        click.echo(f"wrote {path}")
    if report.errors:
        for name, error in report.errors.items():
            click.echo(f"error: {name}: {error}", err=True)
        sys.exit(1)


def _print_artifacts(codegen: PipelineGenerator, names: list[str]) -> None:
    failed = False
    for name in names:
        try:
            click.echo(codegen.export_to_string(name), nl=False)
        except GenerationError as e:
            click.echo(f"error: {name}: {e}", err=True)
            failed = True
    if failed:
        sys.exit(1)
