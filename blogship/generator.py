"""Static site generator invocation for blogship.

The generator is an external program (Hugo by default). blogship treats it
as a black box: it runs the configured command from the project root and
only looks at the exit status. A ``{output}`` placeholder in the command is
replaced with the destination directory.

Key classes:
- SiteGenerator: Protocol for anything that can build the site into a directory.
- CommandGenerator: Runs the configured external command.
"""

from __future__ import annotations

import shlex
import subprocess
from abc import abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from .errors import ConfigError, GeneratorError
from .utils import find_executable

OUTPUT_PLACEHOLDER = "{output}"


@runtime_checkable
class SiteGenerator(Protocol):
    """Protocol for building a site into an output directory."""

    @abstractmethod
    def build(self, destination: Path) -> None:
        """Build the site into ``destination``.

        Raises:
            GeneratorError: If the build fails.
        """
        ...


def parse_command(command: str | list[str]) -> list[str]:
    """Split a configured generator command into an argument list."""
    if isinstance(command, str):
        args = shlex.split(command)
    elif isinstance(command, list) and all(isinstance(a, str) for a in command):
        args = list(command)
    else:
        raise ConfigError("generator.command must be a string or a list of strings")
    if not args:
        raise ConfigError("generator.command is empty")
    return args


class CommandGenerator:
    """Builds the site by running an external command.

    Attributes:
        project_root: Directory the command runs in.
        command: Argument list, possibly containing ``{output}``.
    """

    def __init__(self, project_root: Path, command: str | list[str]):
        self.project_root = project_root
        self.command = parse_command(command)

    @classmethod
    def from_config(cls, project_root: Path, config: Mapping[str, Any]) -> CommandGenerator:
        return cls(project_root, config["generator"]["command"])

    def resolve(self, destination: Path) -> list[str]:
        """Return the concrete argument list for a build into ``destination``."""
        executable = find_executable(self.command[0])
        if executable is None:
            raise GeneratorError(
                self.command, 127, f"executable {self.command[0]!r} not found"
            )
        args = [executable]
        for arg in self.command[1:]:
            args.append(arg.replace(OUTPUT_PLACEHOLDER, str(destination)))
        return args

    def build(self, destination: Path) -> None:
        """Run the generator into ``destination``.

        Raises:
            GeneratorError: If the executable is missing or exits non-zero.
        """
        args = self.resolve(destination)
        logger.debug("$ {}", " ".join(args))
        result = subprocess.run(
            args,
            cwd=self.project_root,
            capture_output=True,
            text=True,
        )
        output = (result.stdout + result.stderr).rstrip()
        if output:
            logger.debug(output)
        if result.returncode != 0:
            raise GeneratorError(args, result.returncode, output)
