"""Exception hierarchy for n8n-workflow-sync.

Every failure the CLI reports derives from :class:`WorkflowSyncError`, so
the command layer can catch one type and turn it into an exit status.
Lower-level exceptions (``OSError``, ``git.exc.GitError``, ``requests``
errors) are chained with ``raise ... from``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class WorkflowSyncError(Exception):
    """Base class for all errors raised by this package."""


class IoError(WorkflowSyncError):
    """Filesystem create/write/read failure."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class VersionControlError(WorkflowSyncError):
    """Git repository init/open/stage/commit failure.

    ``file_written`` is True when the workflow file already reached the disk
    before the failure, i.e. the working tree holds uncommitted changes.
    """

    def __init__(self, message: str, directory: Optional[Path] = None, file_written: bool = False):
        super().__init__(message)
        self.directory = directory
        self.file_written = file_written


class ConfigError(WorkflowSyncError):
    """Missing or malformed configuration."""


class RemoteError(WorkflowSyncError):
    """Failure talking to a remote service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(RemoteError):
    """The server rejected the API key (HTTP 401/403)."""


class NotFoundError(RemoteError):
    """The requested workflow does not exist (HTTP 404)."""


class TransportError(RemoteError):
    """Connection failure, unexpected status or undecodable response."""


class NodeVersionFetchError(RemoteError):
    """Fetching node versions failed; no partial result is returned."""


class InputError(WorkflowSyncError):
    """Invalid user-supplied input."""


class AmbiguousInputError(InputError):
    """The workflow file or id could not be determined unambiguously."""


__all__ = [
    "WorkflowSyncError",
    "IoError",
    "VersionControlError",
    "ConfigError",
    "RemoteError",
    "AuthenticationError",
    "NotFoundError",
    "TransportError",
    "NodeVersionFetchError",
    "InputError",
    "AmbiguousInputError",
]
