"""CLI interface for syncing Claude Code sessions into a repository."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import (
    KEEP_FILE,
    SOURCE_DIR_ENV_VAR,
    find_git_repo,
    find_repo_dir,
    marker_dir,
    resolve_source_root,
)
from .exceptions import FileSystemError, RepositoryNotFoundError, SyncSourceError
from .filesystem import RealFileSystem
from .output import OutputFormatter
from .path_converter import encode
from .sync import SyncDecision, SyncEngine, SyncReport
from .utils import format_size, pluralize

logger = logging.getLogger(__name__)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="ccsync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """ccsync - Sync Claude Code session files into a git repository."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("ccsync").setLevel(logging.DEBUG)
    elif quiet or json:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--repo-dir",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    help="Repository directory (defaults to the nearest parent with .git)",
)
@click.pass_context
def init(ctx: Any, repo_dir: Optional[Path]) -> None:
    """Initialize a repository for session syncing.

    Creates .claude/ccss_sessions/.gitkeep inside the repository.
    """
    out: OutputFormatter = ctx.obj["out"]

    if repo_dir is None:
        try:
            repo_dir = find_git_repo(Path.cwd())
        except RepositoryNotFoundError as e:
            out.error(str(e))
            ctx.exit(1)
            return

    filesystem = RealFileSystem()
    sessions_dir = marker_dir(repo_dir)
    keep_file = sessions_dir / KEEP_FILE

    try:
        filesystem.create_directory(sessions_dir)
        if not keep_file.exists():
            filesystem.write_file(keep_file, b"")
    except FileSystemError as e:
        out.error(f"Failed to initialize {sessions_dir}: {e}")
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {"sessions_dir": str(sessions_dir), "keep_file": str(keep_file)}
        )
        return

    out.success(f"Initialized session sync directory at: {sessions_dir}")
    out.info(f"Created: {keep_file}")


@main.command()
@click.option(
    "--source-dir",
    "-s",
    envvar=SOURCE_DIR_ENV_VAR,
    type=click.Path(file_okay=False, path_type=Path),
    help=(
        "Directory containing Claude Code project sessions "
        f"(defaults to ${SOURCE_DIR_ENV_VAR} or ~/.claude/projects/)"
    ),
)
@click.option(
    "--repo-dir",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    help="Target repository (defaults to the nearest initialized parent)",
)
@click.option(
    "--dry-run",
    "-d",
    is_flag=True,
    help="Show what would be done without making changes",
)
@click.option(
    "--all-projects",
    is_flag=True,
    help="Sync every project in the source directory, not only this repository",
)
@click.pass_context
def sync(
    ctx: Any,
    source_dir: Optional[Path],
    repo_dir: Optional[Path],
    dry_run: bool,
    all_projects: bool,
) -> None:
    """Sync session files into the repository.

    Files are copied when they are missing from the repository or when the
    source is newer; the copy keeps the source's modification time.
    Exits with status 1 if any file fails to sync.

    Examples:
        ccsync sync                      # Sync this repository's sessions
        ccsync sync --dry-run            # Preview what would be copied
        ccsync sync --all-projects       # Sync every project
        ccsync sync -s /backup/projects  # Use another source directory
    """
    out: OutputFormatter = ctx.obj["out"]
    verbose: bool = ctx.obj.get("verbose", False)

    if repo_dir is None:
        try:
            repo_dir = find_repo_dir(Path.cwd())
        except RepositoryNotFoundError as e:
            out.error(str(e))
            ctx.exit(1)
            return
    repo_dir = repo_dir.resolve()
    logger.info("Using repository directory: %s", repo_dir)

    source_root = resolve_source_root(source_dir)
    target_dir = marker_dir(repo_dir)

    if not target_dir.is_dir():
        out.error(
            f"Target directory does not exist: {target_dir}. "
            "Run 'ccsync init' first"
        )
        ctx.exit(1)
        return

    projects: Optional[set[str]] = None
    if not all_projects:
        project = encode(repo_dir)
        logger.debug("Repository project name: %s", project)
        project_dir = source_root / project
        if not project_dir.is_dir():
            out.error(f"Source directory does not exist: {project_dir}")
            ctx.exit(1)
            return
        projects = {project}

    out.info("Syncing Claude Code sessions:")
    out.info(f"  Source: {source_root}")
    out.info(f"  Target: {target_dir}")
    if dry_run:
        out.info("  Mode: DRY RUN (no changes will be made)")
    out.info("")

    engine = SyncEngine(RealFileSystem())
    try:
        report = _run_with_progress(
            engine, out, source_root, target_dir, dry_run, projects
        )
    except SyncSourceError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(report.to_dict())
    else:
        _display_report(out, report, verbose)

    if report.has_failures:
        out.error(f"{pluralize(len(report.failed), 'file')} failed to sync")
        ctx.exit(1)


def _run_with_progress(
    engine: SyncEngine,
    out: OutputFormatter,
    source_root: Path,
    target_dir: Path,
    dry_run: bool,
    projects: Optional[set[str]],
) -> SyncReport:
    """Run the engine behind a transient spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=out.err_console,
        transient=True,
        disable=out.quiet or out.json_output,
    ) as progress:
        task = progress.add_task("Scanning session files...", total=None)
        processed = 0

        def on_decision(decision: SyncDecision) -> None:
            nonlocal processed
            processed += 1
            progress.update(
                task,
                description=f"Processed {pluralize(processed, 'file')}: "
                f"{decision.relative_path}",
            )

        return engine.sync(
            source_root,
            target_dir,
            dry_run=dry_run,
            projects=projects,
            on_decision=on_decision,
        )


def _display_report(out: OutputFormatter, report: SyncReport, verbose: bool) -> None:
    """Print per-file lines and the summary table."""
    copy_label = "Would copy" if report.dry_run else "Copied"

    for decision in report.decisions:
        if decision.is_copy:
            out.print(
                f"  {copy_label}: {decision.relative_path} "
                f"({format_size(decision.size)})"
            )
        elif decision.is_skip:
            if verbose:
                out.print(f"  Skipped (up to date): {decision.relative_path}")
        else:
            out.warning(f"  Failed: {decision.relative_path}: {decision.reason}")

    for warning in report.warnings:
        out.warning(f"  Ignored: {warning.path}: {warning.message}")

    out.print("")
    if report.dry_run:
        out.success("Dry run complete!")
    else:
        out.success("Sync complete!")

    counts = report.counts
    items = [
        (copy_label, pluralize(counts["copy"], "file")),
        ("Skipped", pluralize(counts["skip"], "file")),
        ("Failed", pluralize(counts["fail"], "file")),
    ]
    if not report.dry_run:
        items.append(
            ("Directories created", str(report.directories_created))
        )
    out.print_summary("Dry Run Summary" if report.dry_run else "Sync Summary", items)

    if not report.decisions:
        out.info("No session files found.")
    elif counts["copy"] == 0 and counts["fail"] == 0:
        out.info("No changes needed - everything is in sync!")
