"""Build and publish jobs for blogship.

This module contains the two CI jobs. Both are strictly sequential and
fail fast: the first error raises and nothing after it runs.

Key functions:
- verify: Validate the content tree and build the site into a scratch directory.
- publish: Rebuild the site into a fresh clone of the hosting repository and
  push it if, and only if, the generated tree changed.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from .config import require_env
from .content import ContentDocument, ContentTree
from .credentials import secure_key
from .errors import ConfigError, ReproducibilityError
from .generator import CommandGenerator, SiteGenerator
from .git import GitRepository
from .utils import clean_worktree, ensure_absent, tree_digest


@dataclass
class VerifyResult:
    """Result of a verification run.

    Attributes:
        documents: Documents loaded from the content tree.
        digest: SHA-256 digest of the generated output tree.
        reproducible: Whether a second build matched, or None if not checked.
    """

    documents: list[ContentDocument]
    digest: str
    reproducible: bool | None = None


@dataclass
class PublishResult:
    """Result of a publish run.

    Attributes:
        output_dir: Working tree of the cloned hosting repository.
        changed_paths: Paths whose content differs from what was published.
        committed: Whether a commit was made.
        pushed: Whether the commit was pushed.
        commit: Id of the new commit, if any.
    """

    output_dir: Path
    changed_paths: list[str] = field(default_factory=list)
    committed: bool = False
    pushed: bool = False
    commit: str | None = None


def _content_dir(project_root: Path, config: Mapping[str, Any]) -> Path:
    return project_root / config["content_dir"]


def _output_dir(project_root: Path, config: Mapping[str, Any]) -> Path:
    output_dir = (project_root / config["output_dir"]).resolve()
    root = project_root.resolve()
    if output_dir == root or output_dir in root.parents:
        raise ConfigError(
            f"output_dir {config['output_dir']!r} must not be the project root "
            "or one of its parents"
        )
    content_dir = _content_dir(project_root, config).resolve()
    if (
        output_dir == content_dir
        or content_dir in output_dir.parents
        or output_dir in content_dir.parents
    ):
        raise ConfigError("output_dir must not overlap content_dir")
    return output_dir


def _build_once(generator: SiteGenerator) -> str:
    with tempfile.TemporaryDirectory(prefix="blogship-") as tmp:
        destination = Path(tmp) / "site"
        destination.mkdir()
        generator.build(destination)
        return tree_digest(destination)


def verify(
    project_root: Path,
    config: Mapping[str, Any],
    reproducible: bool = False,
    generator: SiteGenerator | None = None,
) -> VerifyResult:
    """Run the verification job.

    Loads and validates every content document, then builds the site into a
    temporary directory so the project tree is left untouched.

    Args:
        project_root: Root directory of the blog project.
        config: Loaded configuration.
        reproducible: Build twice and require byte-identical output.
        generator: Optional generator override (defaults to the configured command).

    Returns:
        VerifyResult with the loaded documents and the output digest.

    Raises:
        ContentError: If any document is invalid.
        GeneratorError: If the generator fails.
        ReproducibilityError: If ``reproducible`` is set and the builds differ.
    """
    generator = generator or CommandGenerator.from_config(project_root, config)

    documents = ContentTree(_content_dir(project_root, config)).load()
    logger.info("Validated {} content documents", len(documents))

    digest = _build_once(generator)
    logger.info("Site built successfully (digest {})", digest[:12])

    result = VerifyResult(documents=documents, digest=digest)
    if reproducible:
        second = _build_once(generator)
        result.reproducible = second == digest
        if not result.reproducible:
            raise ReproducibilityError(
                "Two builds of the same content produced different output "
                f"({digest[:12]} != {second[:12]}); check for embedded timestamps"
            )
        logger.info("Second build is byte-identical")
    return result


def publish(
    project_root: Path,
    config: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
    dry_run: bool = False,
    generator: SiteGenerator | None = None,
) -> PublishResult:
    """Run the publish job.

    Steps, each aborting the run on failure:

    1. Restrict the deploy key to owner read-only.
    2. Clone the hosting repository fresh into the output directory.
    3. Delete everything in the clone except ``.git``.
    4. Write the custom-domain marker file.
    5. Validate the content tree and regenerate the site into the clone.
    6. Stage everything; commit and push only if the staged tree changed.

    The push is the last step, so any failure before it leaves the hosting
    repository untouched.

    Args:
        project_root: Root directory of the blog project.
        config: Loaded configuration.
        environ: Environment to read secrets from (defaults to os.environ).
        dry_run: Stop after computing the staged changes.
        generator: Optional generator override (defaults to the configured command).

    Returns:
        PublishResult describing what changed and whether it was pushed.
    """
    environ = os.environ if environ is None else environ
    publish_cfg = config["publish"]
    generator = generator or CommandGenerator.from_config(project_root, config)
    output_dir = _output_dir(project_root, config)

    key = secure_key(Path(require_env(config, "deploy_key", environ)))
    logger.info("Deploy key secured")

    repository_url = require_env(config, "repository", environ)
    cname = require_env(config, "cname", environ)
    git_env = {
        "GIT_SSH_COMMAND": key.ssh_command(
            strict_host_key_checking=bool(publish_cfg["strict_host_key_checking"])
        ),
        "GIT_TERMINAL_PROMPT": "0",
    }

    ensure_absent(output_dir)
    repo = GitRepository.clone(repository_url, output_dir, env=git_env)
    logger.info("Cloned publish repository into {}", output_dir)

    removed = clean_worktree(output_dir)
    logger.info("Cleared {} entries from the working tree", len(removed))

    marker = output_dir / config["marker_file"]
    marker.write_text(f"{cname}\n", encoding="utf-8")

    documents = ContentTree(_content_dir(project_root, config)).load()
    logger.info("Validated {} content documents", len(documents))
    generator.build(output_dir)
    logger.info("Site regenerated")

    repo.add_all()
    result = PublishResult(output_dir=output_dir, changed_paths=repo.staged_changes())
    if not result.changed_paths:
        logger.info("No changes to publish")
        return result

    logger.info("{} paths changed", len(result.changed_paths))
    if dry_run:
        logger.info("Dry run: not committing")
        return result

    result.commit = repo.commit(
        publish_cfg["commit_message"],
        author_name=publish_cfg["author_name"],
        author_email=publish_cfg["author_email"],
    )
    result.committed = True
    repo.push(publish_cfg["remote"])
    result.pushed = True
    logger.info("Pushed {} to {}", result.commit[:12], publish_cfg["remote"])
    return result
