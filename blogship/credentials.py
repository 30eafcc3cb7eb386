"""Deploy key handling for blogship.

The publish job pushes over SSH with a key the CI platform hands over as a
file. The key is locked down to owner read-only before it is used and the
job refuses to continue if that cannot be guaranteed.
"""

from __future__ import annotations

import os
import shlex
import stat
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .errors import CredentialError

KEY_MODE = 0o400


@dataclass(frozen=True)
class DeployKey:
    """A deploy key file that has been restricted to owner read-only.

    Attributes:
        path: Location of the private key file.
    """

    path: Path

    def ssh_command(self, strict_host_key_checking: bool = False) -> str:
        """Return a GIT_SSH_COMMAND value that authenticates with this key."""
        parts = ["ssh", "-i", str(self.path), "-o", "IdentitiesOnly=yes"]
        if not strict_host_key_checking:
            parts += ["-o", "StrictHostKeyChecking=no"]
        return " ".join(shlex.quote(part) for part in parts)


def secure_key(path: Path) -> DeployKey:
    """Restrict a deploy key to owner read-only and verify the result.

    Args:
        path: Path to the private key file.

    Returns:
        DeployKey for the secured file.

    Raises:
        CredentialError: If the file is missing or unreadable, its mode cannot
            be changed, or it still grants group/other permissions afterwards.
    """
    if not path.is_file():
        raise CredentialError(f"Deploy key {path} does not exist or is not a file")
    try:
        os.chmod(path, KEY_MODE)
    except OSError as exc:
        raise CredentialError(
            f"Cannot restrict permissions of deploy key {path}: {exc.strerror}"
        ) from exc

    mode = stat.S_IMODE(path.stat().st_mode)
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        raise CredentialError(
            f"Deploy key {path} is too open (mode {mode:04o}); refusing to use it"
        )
    if not os.access(path, os.R_OK):
        raise CredentialError(f"Deploy key {path} is not readable")

    logger.debug("Deploy key {} restricted to mode {:04o}", path, mode)
    return DeployKey(path=path)
