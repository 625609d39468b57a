"""Append-only git history for workflow directories.

Only two things are ever needed from git: make sure a repository exists at
a directory, and record one commit for the files a sync just wrote. Trees,
indexes and signatures stay inside this module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from git import Actor, IndexFile, Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError

from .errors import VersionControlError

logger = logging.getLogger(__name__)

COMMIT_IDENTITY = Actor("n8n-workflow-sync", "n8n@localhost")


def commit_message(workflow_id: str, source: str = "n8n") -> str:
    """Commit message recorded for every pull/new."""
    return f"feat: sync from {source} (workflow {workflow_id})"


class GitHistory:
    """Thin wrapper over GitPython for a single workflow directory."""

    def init(self, directory: Path) -> Repo:
        """Initialize a repository rooted at ``directory``.

        Raises:
            VersionControlError: If ``git init`` fails
        """
        try:
            repo = Repo.init(str(directory), mkdir=True)
        except (GitError, OSError, ValueError) as e:
            raise VersionControlError(
                f"Failed to initialize git repository in {directory}: {e}", directory=directory
            ) from e
        logger.info(f"Initialized git repository in {directory}")
        return repo

    def open(self, directory: Path) -> Repo:
        """Open the repository rooted at ``directory`` (no parent search).

        Raises:
            InvalidGitRepositoryError, NoSuchPathError: If there is none
        """
        return Repo(str(directory), search_parent_directories=False)

    def open_or_init(self, directory: Path) -> Repo:
        """Reuse the repository at ``directory`` or initialize a new one."""
        try:
            repo = self.open(directory)
            logger.debug(f"Using existing git repository in {directory}")
            return repo
        except (InvalidGitRepositoryError, NoSuchPathError):
            return self.init(directory)
        except (GitError, OSError) as e:
            raise VersionControlError(
                f"Failed to open git repository in {directory}: {e}", directory=directory
            ) from e

    def stage_and_commit(self, repo: Repo, relative_paths: Iterable[Path], message: str) -> str:
        """Stage exactly ``relative_paths`` and append one commit.

        The commit is built from HEAD's tree plus ``relative_paths``, not from
        the repository index, so changes the user staged by hand stay staged
        and out of the commit.

        Args:
            repo: Repository returned by :meth:`init` or :meth:`open_or_init`
            relative_paths: Files relative to the working tree root
            message: Commit message

        Returns:
            Hex SHA of the new commit

        Raises:
            VersionControlError: If staging or committing fails
        """
        directory = Path(repo.working_tree_dir or ".")
        paths = [Path(p).as_posix() for p in relative_paths]
        try:
            repo.index.add(paths)
        except (GitError, OSError, ValueError) as e:
            raise VersionControlError(
                f"Failed to stage {', '.join(paths)} in {directory}: {e}", directory=directory
            ) from e

        try:
            commit_index = self._head_index(repo)
            commit_index.add(paths, write=False)
            commit = commit_index.commit(
                message, author=COMMIT_IDENTITY, committer=COMMIT_IDENTITY, skip_hooks=True
            )
        except (GitError, OSError, ValueError) as e:
            raise VersionControlError(
                f"Failed to create commit in {directory}: {e}", directory=directory
            ) from e

        logger.info(f"Committed {', '.join(paths)} as {commit.hexsha[:8]} in {directory}")
        return commit.hexsha

    @staticmethod
    def _head_index(repo: Repo) -> IndexFile:
        """In-memory index holding HEAD's tree (empty on an unborn branch)."""
        if repo.head.is_valid():
            return IndexFile.from_tree(repo, repo.head.commit)
        # Never written; a missing index file reads as empty.
        return IndexFile(repo, str(Path(repo.git_dir) / "n8n-workflow-sync.index"))

    def commit_count(self, directory: Path) -> int:
        """Number of commits reachable from HEAD (0 for no repository or no commits)."""
        try:
            repo = self.open(directory)
        except (InvalidGitRepositoryError, NoSuchPathError):
            return 0
        if not repo.head.is_valid():
            return 0
        return sum(1 for _ in repo.iter_commits())
