"""
Environment health check.

Answers "why is nothing happening?": is git there, is the workspace a git
work tree, which clients are attached and what the configuration allows.
"""
import asyncio
import logging
import platform
import sys
from typing import List, Optional, Sequence, Tuple

from .config import Settings
from .core.host import EditorHost
from .models import HealthLevel, HealthResult

MINIMUM_PYTHON = (3, 10)


async def _run(cmd: Sequence[str], cwd: str, timeout: float) -> Tuple[int, str]:
    """Run a command, returning (returncode, stdout). Missing executables give 127."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logging.debug(f"Health check could not start {cmd[0]}: {e}")
        return 127, ""

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, ""

    return process.returncode, stdout.decode(errors="replace").strip()


def check_python_version() -> HealthResult:
    version = platform.python_version()
    if sys.version_info[:2] >= MINIMUM_PYTHON:
        return HealthResult(level=HealthLevel.OK, message=f"Python {version}")
    required = ".".join(str(part) for part in MINIMUM_PYTHON)
    return HealthResult(
        level=HealthLevel.ERROR,
        message=f"Python >= {required} required (found {version})",
        advice=[f"Install Python {required} or later"],
    )


async def check_git_available(settings: Settings) -> HealthResult:
    returncode, output = await _run(
        ("git", "--version"),
        str(settings.resolved_workspace_root),
        settings.discovery_timeout_seconds,
    )
    if returncode == 0:
        return HealthResult(level=HealthLevel.OK, message=f"git is available: {output}")
    return HealthResult(
        level=HealthLevel.ERROR,
        message="git is not available",
        advice=["Install git: https://git-scm.com/"],
    )


async def check_git_work_tree(settings: Settings) -> HealthResult:
    root = settings.resolved_workspace_root
    returncode, _ = await _run(
        ("git", "rev-parse", "--is-inside-work-tree"),
        str(root),
        settings.discovery_timeout_seconds,
    )
    if returncode == 0:
        return HealthResult(
            level=HealthLevel.OK, message=f"{root} is inside a git repository"
        )
    return HealthResult(
        level=HealthLevel.WARN,
        message=f"{root} is not inside a git repository",
        advice=[
            "workspace-diagnostics requires a git repository to collect files",
            "Run 'git init' to initialize a repository",
        ],
    )


def check_clients(host: EditorHost) -> HealthResult:
    names = [client.name for client in host.get_clients(None)]
    if names:
        return HealthResult(
            level=HealthLevel.OK, message=f"Language clients attached: {', '.join(names)}"
        )
    return HealthResult(level=HealthLevel.INFO, message="No language clients currently attached")


def configuration_summary(settings: Settings) -> List[HealthResult]:
    return [
        HealthResult(
            level=HealthLevel.INFO,
            message=f"Allowed clients: {', '.join(sorted(settings.allowed_client_names))}",
        ),
        HealthResult(
            level=HealthLevel.INFO,
            message=f"Allowed extensions: {', '.join(sorted(settings.allowed_extensions))}",
        ),
        HealthResult(
            level=HealthLevel.INFO,
            message=(
                f"Chunk size {settings.chunk_size}, delay {settings.chunk_delay_ms}ms, "
                f"cache TTL {settings.cache_ttl_seconds:.0f}s, progress {settings.progress_mode}"
            ),
        ),
    ]


async def run_health_check(
    settings: Settings, host: Optional[EditorHost] = None
) -> List[HealthResult]:
    results = [check_python_version()]
    results.append(await check_git_available(settings))
    results.append(await check_git_work_tree(settings))
    if host is not None:
        results.append(check_clients(host))
    results.extend(configuration_summary(settings))
    return results
