"""Runs the external "list tracked files" command."""

import asyncio
import logging
import shlex
from typing import List, Protocol

from workspace_diagnostics.core.exceptions import DiscoveryError

from .domain_objects import CatalogConfiguration


class FileLister(Protocol):
    async def list_files(self) -> List[str]:
        """Raw, newline-delimited listing. Raises DiscoveryError on failure."""
        ...


class GitFileLister:
    """Lists tracked files with `git ls-files` (or any configured argv)."""

    def __init__(self, config: CatalogConfiguration):
        self.config = config

    @property
    def command_line(self) -> str:
        return shlex.join(self.config.discovery_command)

    async def list_files(self) -> List[str]:
        cmd = list(self.config.discovery_command)
        if not cmd:
            raise DiscoveryError("", "no discovery command configured")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self.config.workspace_root,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            # Executable missing or workspace root unusable
            raise DiscoveryError(self.command_line, str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.discovery_timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise DiscoveryError(
                self.command_line,
                f"timed out after {self.config.discovery_timeout_seconds}s",
            )

        if process.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip() if stderr else "Unknown error"
            raise DiscoveryError(self.command_line, error_msg, process.returncode)

        lines = [line for line in stdout.decode(errors="replace").splitlines() if line.strip()]
        logging.debug(f"'{self.command_line}' listed {len(lines)} paths")
        return lines
