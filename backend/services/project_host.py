"""
Host capabilities the core needs from its environment.

The parsers and services never touch the shell or filesystem directly;
they go through a BaseProjectHost so the same code runs behind the HTTP
API, from a script, or against a test double.
"""

import logging
import os
import subprocess
from typing import List, Optional

from parsers.base import read_file_safe

logger = logging.getLogger(__name__)


class HostCommandError(Exception):
    """A shell command failed (non-zero exit, timeout, or could not start)."""
    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ''):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class HostIOError(OSError):
    """A file or directory could not be listed or read."""
    pass


class BaseProjectHost:
    """Interface: shell execution, file listing/reading, directory choice."""

    def execute_shell_command(self, command: str) -> str:
        """Run command, returning its output. Raises HostCommandError."""
        raise NotImplementedError

    def list_files(self, directory: str) -> List[str]:
        """Paths of the regular files directly inside directory. Raises HostIOError."""
        raise NotImplementedError

    def read_text_file(self, path: str) -> str:
        """Text content of path. Raises HostIOError."""
        raise NotImplementedError

    def choose_directory(self) -> str:
        """Directory new projects are created in."""
        raise NotImplementedError

    def file_exists(self, path: str) -> bool:
        directory, name = os.path.split(path)
        try:
            return any(os.path.basename(f) == name for f in self.list_files(directory))
        except HostIOError:
            return False


class LocalProjectHost(BaseProjectHost):
    """Runs commands through the system shell and reads the local disk."""

    def __init__(self, default_directory: str = None, timeout: Optional[float] = None):
        self.default_directory = default_directory or os.path.expanduser('~')
        self.timeout = timeout

    def execute_shell_command(self, command: str) -> str:
        logger.debug("Executing: %s", command)
        try:
            completed = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise HostCommandError(f"Command timed out: {command}") from e
        except OSError as e:
            raise HostCommandError(f"Command could not start: {e}") from e

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or '').strip()
            raise HostCommandError(
                detail or f"Command failed with exit code {completed.returncode}",
                returncode=completed.returncode,
                output=completed.stdout,
            )
        return completed.stdout or 'Command executed successfully'

    def list_files(self, directory: str) -> List[str]:
        try:
            names = os.listdir(directory)
        except OSError as e:
            raise HostIOError(f"Cannot list {directory}: {e.strerror or e}") from e
        return sorted(
            os.path.join(directory, name) for name in names
            if os.path.isfile(os.path.join(directory, name))
        )

    def read_text_file(self, path: str) -> str:
        content = read_file_safe(path)
        if content is None:
            raise HostIOError(f"Cannot read {path}")
        return content

    def choose_directory(self) -> str:
        return self.default_directory
