"""
Main CLI entry point for dependency update analysis.
"""

import click
from dotenv import load_dotenv

from ..go_modules import GoModReader, GoModuleUpdater, ModuleProxyClient
from ..shared_utilities import configure_logging, get_logger
from .config import ConfigManager
from .core import AnalysisCoordinator
from .data_models import AnalysisBatch, AnalysisResult, Dependency
from .errors import UpdateAnalysisError, UpdateApplyError
from .output_formatter import AnalysisFormatter

# Load environment variables from .env file
load_dotenv()


def apply_updates(
    updater: GoModuleUpdater, approved: list[AnalysisResult]
) -> list[Dependency]:
    """Apply approved updates, returning the dependencies that were updated."""
    logger = get_logger(__name__)
    applied = []
    for result in approved:
        try:
            updater.apply_update(result.dependency)
        except UpdateApplyError as e:
            logger.error(str(e))
            click.echo(f"  Failed: {e}", err=True)
            continue
        click.echo(
            f"  Updated {result.dependency.name} to {result.dependency.latest_version}",
            err=True,
        )
        applied.append(result.dependency)
    return applied


def tidy_modules(updater: GoModuleUpdater) -> None:
    click.echo("🧹 Running go mod tidy...", err=True)
    try:
        updater.tidy()
    except UpdateApplyError as e:
        get_logger(__name__).warning(str(e))
        click.echo(f"  {e}", err=True)


def run_automatic_mode(
    coordinator: AnalysisCoordinator,
    updater: GoModuleUpdater,
    dependencies: list[Dependency],
    formatter: AnalysisFormatter,
    output_format: str = "table",
    dry_run: bool = False,
) -> AnalysisBatch:
    """Analyze every dependency, then apply the approved updates."""
    batch = coordinator.analyze_many(dependencies)

    if output_format == "json":
        click.echo(formatter.format_json_output(batch))
    else:
        click.echo(formatter.format_table_output(batch))

    if dry_run or not batch.approved:
        return batch

    click.echo("🚀 Applying approved updates...", err=True)
    if apply_updates(updater, batch.approved):
        tidy_modules(updater)

    return batch


def run_interactive_mode(
    coordinator: AnalysisCoordinator,
    updater: GoModuleUpdater,
    dependencies: list[Dependency],
    formatter: AnalysisFormatter,
) -> list[Dependency]:
    """Walk through the dependencies one by one, asking before each update."""
    logger = get_logger(__name__)
    applied: list[Dependency] = []

    for dependency in dependencies:
        try:
            result = coordinator.analyze(dependency)
        except UpdateAnalysisError as e:
            logger.warning(f"Could not analyze {dependency.name}: {e}")
            continue

        if result.skipped:
            continue

        click.echo("")
        click.echo(formatter.format_result(result))

        response = click.prompt(
            "Apply this update? (y/n/q)", default="n", show_default=False
        ).strip().lower()

        if response in ("q", "quit"):
            break
        if response in ("y", "yes"):
            applied.extend(apply_updates(updater, [result]))
        else:
            click.echo("⏭️  Skipped")

    if applied:
        tidy_modules(updater)
    return applied


@click.command()
@click.option(
    "--path",
    "project_path",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Path to the Go project",
    show_default=True,
)
@click.option("--interactive", is_flag=True, help="Ask before applying each update")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Analyze only, never modify go.mod",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format for automatic mode",
    show_default=True,
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    help="Number of dependencies analyzed concurrently",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with analysis settings",
)
def main(
    project_path: str,
    interactive: bool,
    verbose: bool,
    dry_run: bool,
    output_format: str,
    max_workers: int | None,
    config_file: str | None,
) -> None:
    """
    Analyze and update the direct dependencies of a Go project.

    Every dependency with a newer version is cloned and the commits between
    the current and latest versions are scanned. Updates with breaking changes
    are left for manual review; updates with fixes, optimizations or features
    are applied.

    Examples:

        # Analyze and apply safe updates in the current project
        depvet

        # Only report, as JSON
        depvet --dry-run --format json

        # Ask before each update
        depvet --path ./my-project --interactive --verbose
    """
    configure_logging(verbose=verbose)
    logger = get_logger(__name__)

    try:
        config = ConfigManager(config_file).load().with_overrides(
            max_workers=max_workers
        )
        dependencies = GoModReader(project_path).get_dependencies()
    except UpdateAnalysisError as e:
        logger.error(str(e))
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    click.echo(f"Found {len(dependencies)} direct dependencies", err=True)

    coordinator = AnalysisCoordinator(
        config=config,
        version_lookup=ModuleProxyClient(config.proxy_url, config.http_timeout),
    )
    updater = GoModuleUpdater(project_path)
    formatter = AnalysisFormatter()

    if interactive:
        run_interactive_mode(coordinator, updater, dependencies, formatter)
    else:
        run_automatic_mode(
            coordinator, updater, dependencies, formatter, output_format, dry_run
        )


if __name__ == "__main__":
    main()
