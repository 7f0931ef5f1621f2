import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import Settings
from .logging_config import setup_logging
from .health import run_health_check
from .models import HealthLevel, HealthResult
from .services.catalog.file_catalog import WorkspaceFileCatalog

LEVEL_STYLES = {
    HealthLevel.OK: "bold green",
    HealthLevel.INFO: "cyan",
    HealthLevel.WARN: "bold yellow",
    HealthLevel.ERROR: "bold red",
}


def render_health(results: List[HealthResult], console: Console) -> None:
    table = Table(title="workspace-diagnostics health", show_lines=False)
    table.add_column("Level", no_wrap=True)
    table.add_column("Check")

    for result in results:
        message = result.message
        if result.advice:
            message += "\n" + "\n".join(f"  - {hint}" for hint in result.advice)
        table.add_row(f"[{LEVEL_STYLES[result.level]}]{result.level.value}[/]", message)

    console.print(table)


async def _health(settings: Settings, console: Console) -> int:
    results = await run_health_check(settings)
    render_health(results, console)
    return 1 if any(result.level == HealthLevel.ERROR for result in results) else 0


async def _files(settings: Settings, console: Console, refresh: bool) -> int:
    catalog = WorkspaceFileCatalog(settings.catalog_configuration())
    files = await catalog.get(force_refresh=refresh)
    for path in files:
        console.print(path, highlight=False, soft_wrap=True)
    console.print(
        f"[bold]{len(files)}[/] files under [cyan]{settings.resolved_workspace_root}[/]",
        style="dim",
    )
    return 0 if files else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace_diagnostics",
        description="Workspace-wide diagnostics for language servers",
    )
    parser.add_argument(
        "--workspace-root",
        default=None,
        help="Workspace to inspect (default: current directory)",
    )

    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("health", help="Check git, workspace and configuration")

    files_parser = subcommands.add_parser("files", help="Print the filtered file catalog")
    files_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cached listing",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.workspace_root:
        overrides["workspace_root"] = args.workspace_root
    settings = Settings(**overrides)

    setup_logging(settings)
    console = Console()

    if args.command == "health":
        return asyncio.run(_health(settings, console))
    return asyncio.run(_files(settings, console, args.refresh))


if __name__ == "__main__":
    sys.exit(main())
