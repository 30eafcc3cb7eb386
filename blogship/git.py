"""Thin wrapper around the git executable.

Only the handful of operations the publish job needs are exposed. Every
command runs with captured output; a non-zero exit raises GitError with
the captured stderr so the CI log shows what git said.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from .errors import GitError
from .utils import find_executable


def _git_binary() -> str:
    git_bin = find_executable("git")
    if not git_bin:
        raise GitError(["--version"], 127, "git executable not found in PATH")
    return git_bin


def run_git(
    args: list[str],
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess:
    """Run a git command and return the completed process.

    Args:
        args: Arguments after ``git``.
        cwd: Working directory.
        env: Extra environment variables layered over os.environ.

    Raises:
        GitError: If git exits with a non-zero status.
    """
    full_env = dict(os.environ)
    if env:
        full_env.update(env)
    logger.debug("$ git {}", " ".join(args))
    result = subprocess.run(
        [_git_binary(), *args],
        cwd=cwd,
        env=full_env,
        capture_output=True,
        text=True,
    )
    if result.stdout.strip():
        logger.debug(result.stdout.rstrip())
    if result.returncode != 0:
        raise GitError(args, result.returncode, result.stderr)
    return result


class GitRepository:
    """A local clone of the publish target.

    Attributes:
        path: Root of the working tree.
        env: Environment overrides for every git call (e.g. GIT_SSH_COMMAND).
    """

    def __init__(self, path: Path, env: Mapping[str, str] | None = None):
        self.path = path
        self.env = dict(env or {})

    @classmethod
    def clone(
        cls, url: str, path: Path, env: Mapping[str, str] | None = None
    ) -> GitRepository:
        """Clone ``url`` into ``path`` and return the repository."""
        run_git(["clone", "--quiet", url, str(path)], env=env)
        return cls(path, env)

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        return run_git(list(args), cwd=self.path, env=self.env)

    def add_all(self) -> None:
        self._run("add", "--all", ".")

    def staged_changes(self) -> list[str]:
        """Return paths whose staged content differs from HEAD.

        In a repository without commits every staged path counts as changed.
        """
        result = self._run("diff", "--cached", "--name-only", "--no-renames", "-z")
        return [name for name in result.stdout.split("\0") if name]

    def head(self) -> str | None:
        """Return the HEAD commit id, or None for an empty repository."""
        result = subprocess.run(
            [_git_binary(), "rev-parse", "--verify", "--quiet", "HEAD"],
            cwd=self.path,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def commit(self, message: str, author_name: str, author_email: str) -> str:
        """Commit the staged changes and return the new commit id."""
        identity = {
            "GIT_AUTHOR_NAME": author_name,
            "GIT_AUTHOR_EMAIL": author_email,
            "GIT_COMMITTER_NAME": author_name,
            "GIT_COMMITTER_EMAIL": author_email,
        }
        run_git(
            ["commit", "--quiet", "-m", message],
            cwd=self.path,
            env={**self.env, **identity},
        )
        return self.head() or ""

    def push(self, remote: str = "origin") -> None:
        """Push HEAD to the same-named branch on ``remote``.

        A rejected push (for example a non-fast-forward) raises GitError.
        """
        self._run("push", "--quiet", remote, "HEAD")
