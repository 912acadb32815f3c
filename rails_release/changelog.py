"""Changelog headers and release summaries.

Each framework (and the guides) keeps a CHANGELOG.md whose newest section
starts with a "## <Product> <version> (<date>) ##" header.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

import click

from .models import Release
from .shell import step

PREVIOUS_CHANGES = re.compile(r"^Please check.*for previous changes\.$")
ANY_RELEASE = r"\d+\.\d+\.\d+"


def display_name(name: str) -> str:
    """Human-readable framework name.

    Examples:
        "activesupport" → "Active Support"
        "actionmailbox" → "Action Mailbox"
        "railties" → "Railties"
    """
    return " ".join(part.capitalize() for part in re.split(r"(?<=active|action)", name))


def changelog_path(release: Release, name: str) -> Path:
    return release.root / name / "CHANGELOG.md"


def header(product: str, version: str, today: date) -> str:
    return f"## {product} {version} ({today.strftime('%B %d, %Y')}) ##\n\n"


def prepend_header(contents: str, product: str, version: str, today: date) -> str:
    """Put a new release header on top of a changelog's contents.

    When the changelog already starts with a release header, nothing was
    added since that release, so a "No changes." entry is inserted.
    """
    new = header(product, version, today)
    if contents.startswith("##"):
        new += "*   No changes.\n\n\n"
    return new + contents


def write_header(release: Release, today: date | None = None) -> None:
    """Add a header for the release to every framework and guides changelog."""
    step("Adding changelog headers")
    today = today or date.today()
    config = release.config

    for name in [*config.frameworks, *config.extra_changelogs]:
        path = changelog_path(release, name)
        contents = prepend_header(
            path.read_text(), config.product, str(release.version), today
        )
        path.write_text(contents)
        print(f"  {path.relative_to(release.root)}")


def collect_changes(
    lines: list[str], product: str, base_release: str | None = None
) -> list[str]:
    """Return the entries of the newest changelog section.

    Skips the first line (the newest header) and stops before the header
    of `base_release` (any release when not given), before the "Please
    check ... for previous changes." footer, or at the end of the file.
    """
    release_re = re.escape(base_release) if base_release else ANY_RELEASE
    boundary = re.compile(rf"^## {re.escape(product)} {release_re}.*$")

    changes: list[str] = []
    for line in lines[1:]:
        if boundary.match(line) or PREVIOUS_CHANGES.match(line):
            break
        changes.append(line)
    return changes


def release_summary(
    release: Release, base_release: str | None, release_label: str | None
) -> None:
    """Print the changes of every framework since `base_release`."""
    config = release.config
    click.echo(release_label or "")

    for name in config.frameworks:
        click.echo(f"## {display_name(name)}")
        lines = changelog_path(release, name).read_text().splitlines(keepends=True)
        text = "".join(collect_changes(lines, config.product, base_release))
        click.echo(text, nl=not text.endswith("\n"))
        click.echo()
