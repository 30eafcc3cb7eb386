"""Command-line interface for blogship.

This module defines the CLI commands using Click framework.

Commands:
- verify: Check the content tree and build the site without publishing.
- publish: Rebuild the site into the hosting repository and push changes.
- ci: Run whichever of the two jobs the current branch calls for.
- new: Create a new post with front matter.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import NoReturn

import click
import questionary
import yaml

from . import __version__
from .ci import PUBLISH, current_branch, job_for_branch
from .config import load_config
from .errors import ContentError, GeneratorError, GitError, PipelineError
from .logging_config import configure_logging
from .utils import slugify


@click.group()
@click.version_option(version=__version__, prog_name="blogship")
@click.option("-v", "--verbose", is_flag=True, help="Show commands and their output")
def cli(verbose: bool):
    """Build and publish a static blog."""
    configure_logging(verbose=verbose)


@cli.command()
@click.option(
    "--reproducible",
    is_flag=True,
    help="Build twice and fail unless the output is byte-identical",
)
def verify(reproducible: bool):
    """Validate content and build the site without publishing."""
    _run_verify(Path.cwd(), reproducible)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Stop before committing")
def publish(dry_run: bool):
    """Rebuild the site into the publish repository and push any changes."""
    _run_publish(Path.cwd(), dry_run)


@cli.command()
@click.option("--branch", help="Branch name (defaults to the CI platform's variables)")
def ci(branch: str | None):
    """Run the job for the current branch: publish on trunk, verify elsewhere."""
    project_root = Path.cwd()
    config = _load(project_root, "CI")
    branch = branch or current_branch(os.environ)
    if not branch:
        raise click.ClickException(
            "Cannot determine the branch; pass --branch or set CI_COMMIT_BRANCH"
        )
    job = job_for_branch(branch, str(config["trunk_branch"]))
    click.echo(f"Branch {branch}: running {job} job")
    if job == PUBLISH:
        _run_publish(project_root, dry_run=False)
    else:
        _run_verify(project_root, reproducible=False)


@cli.command()
@click.option("--title", help="Post title (prompts when omitted)")
@click.option("--section", help="Folder inside the content directory, e.g. posts")
@click.option("--tags", help="Comma-separated tags")
@click.option(
    "--date",
    "post_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Publication date (defaults to today)",
)
def new(title: str | None, section: str | None, tags: str | None, post_date):
    """Create a new post with title, date and tags front matter."""
    project_root = Path.cwd()
    config = _load(project_root, "New post")
    content_dir = project_root / config["content_dir"]

    if title is None:
        section, title, tags = _prompt_post(content_dir, section)

    title = title.strip()
    if not title:
        raise click.ClickException("Title cannot be empty")

    target_dir = content_dir / section if section else content_dir
    target_path = target_dir / f"{slugify(title)}.md"
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {target_path.relative_to(project_root)}"
        )

    front_matter = {
        "title": title,
        "date": post_date.date() if post_date else date.today(),
        "tags": _split_tags(tags),
    }
    target_dir.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(front_matter, sort_keys=False, allow_unicode=True)
    target_path.write_text(f"---\n{header}---\n\n", encoding="utf-8")
    click.echo(f"Created {target_path.relative_to(project_root)}")


def main():
    """Entry point for the CLI application."""
    cli()


def _run_verify(project_root: Path, reproducible: bool) -> None:
    from .pipeline import verify as verify_site

    config = _load(project_root, "Verification")
    try:
        result = verify_site(project_root, config, reproducible=reproducible)
    except PipelineError as exc:
        _fail("Verification", exc, project_root)
    click.echo(
        click.style("Verification passed:", fg="green", bold=True)
        + f" {len(result.documents)} documents built"
    )


def _run_publish(project_root: Path, dry_run: bool) -> None:
    from .pipeline import publish as publish_site

    config = _load(project_root, "Publish")
    try:
        result = publish_site(project_root, config, dry_run=dry_run)
    except PipelineError as exc:
        _fail("Publish", exc, project_root)
    if not result.changed_paths:
        click.echo("Nothing to publish: generated site matches the live site")
    elif not result.committed:
        click.echo(f"Dry run: {len(result.changed_paths)} paths would change")
        for path in result.changed_paths:
            click.echo(f"  {path}")
    else:
        click.echo(
            click.style("Published", fg="green", bold=True)
            + f" {len(result.changed_paths)} changed paths as {result.commit[:12]}"
        )


def _load(project_root: Path, job: str) -> dict:
    try:
        return load_config(project_root)
    except PipelineError as exc:
        _fail(job, exc, project_root)


def _fail(job: str, exc: PipelineError, project_root: Path) -> NoReturn:
    """Report a pipeline failure to stderr and exit with status 1."""
    click.echo(click.style(f"{job} failed:", fg="red", bold=True), err=True)
    if isinstance(exc, ContentError):
        try:
            rel_path = exc.source_path.relative_to(project_root)
        except ValueError:
            rel_path = exc.source_path
        click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
    else:
        click.echo(click.style(f"  Error: {exc}", fg="white"), err=True)
    if isinstance(exc, GeneratorError) and exc.output:
        click.echo(exc.output, err=True)
    if isinstance(exc, GitError) and exc.stderr.strip():
        click.echo(exc.stderr.rstrip(), err=True)
    raise SystemExit(1) from None


def _split_tags(tags: str | None) -> list[str]:
    if not tags:
        return []
    seen: list[str] = []
    for tag in tags.split(","):
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _get_content_sections(content_dir: Path) -> list[str]:
    """List the folders of the content directory, with the root first."""
    sections = []
    if content_dir.exists():
        for path in content_dir.iterdir():
            if path.is_dir() and not path.name.startswith((".", "_")):
                sections.append(path.name)
    sections.sort()
    sections.insert(0, ". (root)")
    return sections


def _prompt_post(content_dir: Path, section: str | None):
    """Ask for section, title and tags interactively."""
    if section is None:
        section = questionary.select(
            "Select section:",
            choices=_get_content_sections(content_dir),
            style=_questionary_style(),
        ).ask()
        if section is None:
            raise click.Abort()
        if section == ". (root)":
            section = ""

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()

    tags = questionary.text(
        "Tags (comma-separated):",
        style=_questionary_style(),
    ).ask()
    if tags is None:
        raise click.Abort()
    return section, title, tags


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )
