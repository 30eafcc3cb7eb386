"""Exception hierarchy for blogship.

Every failure the pipeline can hit derives from PipelineError so the CLI
can report it uniformly and exit non-zero. A publish run that finds no
changes is not an error and never raises.
"""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(PipelineError):
    """Invalid blogship.yaml or missing environment variables."""


class ContentError(PipelineError):
    """A content document is malformed.

    Attributes:
        source_path: Path to the offending document.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


class CredentialError(PipelineError):
    """The deploy key is missing, unreadable or too permissive."""


class GeneratorError(PipelineError):
    """The site generator exited with a non-zero status.

    Attributes:
        command: The command that was run.
        returncode: Exit status of the generator.
        output: Captured stdout and stderr.
    """

    def __init__(self, command: list[str], returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Generator {command[0]!r} exited with status {returncode}"
        )


class GitError(PipelineError):
    """A git command failed.

    Attributes:
        git_args: The git arguments (without the executable).
        returncode: Exit status of git.
        stderr: Captured error output.
    """

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.git_args = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        message = f"git {args[0]} failed with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ReproducibilityError(PipelineError):
    """Two builds of the same content produced different output."""
