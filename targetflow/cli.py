"""
Command-line interface for TargetFlow
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import pandas as pd

from . import __version__, check_dependencies, get_info
from .config import Config, get_default_config, save_config
from .core import FactorResult, TargetAnalysis
from .exceptions import TargetFlowError
from .genomics import peaks_from_frame, regions_from_frame
from .utils import setup_logging, validate_output_permissions


class CLIContext:
    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[Config] = None
        self.verbose: bool = False
        self.quiet: bool = False


@click.group()
@click.version_option(__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode (minimal output)")
@click.pass_context
def main(ctx, config, verbose, quiet):
    """
    TargetFlow: rank and test transcription factor targets

    TargetFlow combines ChIP-seq peaks with differential expression
    statistics to rank candidate targets by regulatory potential and to
    test whether binding is associated with up- or down-regulation.
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet

    log_level = "DEBUG" if verbose else "WARNING" if quiet else "INFO"
    setup_logging(level=log_level, use_colors=sys.stdout.isatty())

    if config:
        cli_ctx.config_file = Path(config)
        from .config import load_config

        cli_ctx.config = load_config(cli_ctx.config_file)

    ctx.obj = cli_ctx


@main.command()
def info():
    """Show TargetFlow package information"""

    info_data = get_info()

    click.echo("=" * 50)
    click.echo(f"TargetFlow v{info_data['version']}")
    click.echo("=" * 50)
    click.echo(f"Description: {info_data['description']}")
    click.echo(f"Python version: {info_data['python_version']}")
    click.echo()

    click.echo("Available modules:")
    for module in info_data["modules"]:
        click.echo(f"  - {module}")
    click.echo()

    deps = check_dependencies()
    click.echo("Dependency status:")
    for dep, available in deps.items():
        status = "✓" if available else "✗"
        click.echo(f"  {status} {dep}")


@main.command()
@click.argument("output_file", type=click.Path())
@click.option(
    "--format",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format for configuration file",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file, format, force):
    """Initialize a new TargetFlow configuration file"""

    output_path = Path(output_file)

    if output_path.exists() and not force:
        if not click.confirm(f"File {output_path} already exists. Overwrite?"):
            click.echo("Configuration initialization cancelled.")
            return

    config = get_default_config()

    try:
        if format == "json":
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                json.dump(config.to_dict(), f, indent=2)
        else:
            save_config(config, output_path)

        click.echo(f"Configuration file created: {output_path}")
        click.echo("Edit this file to customize your analysis parameters.")

    except OSError as e:
        click.echo(f"Error creating configuration file: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate_config(config_file):
    """Validate a TargetFlow configuration file"""

    from .config import load_config
    from .config import validate_config as validate_config_func

    try:
        config = load_config(config_file)
    except (OSError, ValueError, TypeError) as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration loaded successfully: {config_file}")

    issues = validate_config_func(config)
    if not issues:
        click.echo("✓ Configuration is valid")
    else:
        click.echo("Configuration issues found:")
        for issue in issues:
            click.echo(f"  ✗ {issue}")
        sys.exit(1)


def _read_table(path: str) -> pd.DataFrame:
    return pd.read_csv(path, sep="\t")


def _write_result(result: FactorResult, output: Path) -> None:
    """Write targets, tests and the run summary of one result"""
    targets_file = output / f"{result.name}_targets.tsv"
    tests_file = output / f"{result.name}_tests.tsv"
    summary_file = output / f"{result.name}_summary.json"

    result.targets_frame().to_csv(targets_file, sep="\t", index=False)
    result.tests_frame().to_csv(tests_file, sep="\t", index=False)
    with open(summary_file, "w") as f:
        json.dump(result.summary(), f, indent=2)

    click.echo(f"Targets: {targets_file}")
    click.echo(f"Tests: {tests_file}")

    for test in result.comparison.tests:
        click.echo(
            f"  {test.group} vs {test.reference}: D = {test.statistic:.4f}, "
            f"p_adj = {test.p_adjusted:.4g}"
        )


def _prepare_output(cli_ctx: CLIContext, output: Optional[str]) -> Path:
    config_output = cli_ctx.config.output_dir if cli_ctx.config else None
    output_path = Path(output or config_output or ".")
    if not validate_output_permissions(output_path):
        click.echo(f"Error: Output directory not writable: {output_path}", err=True)
        sys.exit(1)
    return output_path


@main.command()
@click.option("--peaks", required=True, type=click.Path(exists=True), help="Tab-separated peak table")
@click.option("--regions", required=True, type=click.Path(exists=True), help="Tab-separated region table")
@click.option("--name", default="factor", show_default=True, help="Factor name")
@click.option("--stat", default=None, help="Statistic column (defaults to config stat_key)")
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.pass_context
def run(ctx, peaks, regions, name, stat, output):
    """Rank and test the targets of one factor"""

    cli_ctx = ctx.obj
    output_path = _prepare_output(cli_ctx, output)

    try:
        analysis = TargetAnalysis(cli_ctx.config)
        result = analysis.run_factor(
            name,
            peaks_from_frame(_read_table(peaks)),
            regions_from_frame(_read_table(regions)),
            stat_key=stat,
        )
    except TargetFlowError as e:
        click.echo(f"Analysis failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Ranked {len(result.targets)} targets of {name}")
    _write_result(result, output_path)


@main.command()
@click.option("--peaks-a", required=True, type=click.Path(exists=True), help="Peak table of the first factor")
@click.option("--peaks-b", required=True, type=click.Path(exists=True), help="Peak table of the second factor")
@click.option("--regions-a", required=True, type=click.Path(exists=True), help="Region table of the first factor")
@click.option("--regions-b", required=True, type=click.Path(exists=True), help="Region table of the second factor")
@click.option("--names", nargs=2, default=("A", "B"), show_default=True, help="Factor names")
@click.option("--stat", default=None, help="Statistic column (defaults to config stat_key)")
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.pass_context
def run_pair(ctx, peaks_a, peaks_b, regions_a, regions_b, names, stat, output):
    """Rank and test the shared targets of two factors"""

    cli_ctx = ctx.obj
    output_path = _prepare_output(cli_ctx, output)

    try:
        analysis = TargetAnalysis(cli_ctx.config)
        result = analysis.run_pair(
            tuple(names),
            peaks_from_frame(_read_table(peaks_a)),
            peaks_from_frame(_read_table(peaks_b)),
            regions_from_frame(_read_table(regions_a)),
            regions_from_frame(_read_table(regions_b)),
            stat=stat,
        )
    except TargetFlowError as e:
        click.echo(f"Analysis failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Ranked {len(result.targets)} shared targets of {names[0]} and {names[1]}")
    _write_result(result, output_path)


if __name__ == "__main__":
    main()
