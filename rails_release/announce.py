"""Release announcement drafting.

Renders the announcement email for one or more patch releases from a
Jinja2 template and prints it, ready to be pasted into the mailing list
or blog post.
"""

from __future__ import annotations

import hashlib
import os
import re
from datetime import date, timedelta
from pathlib import Path

import click
from jinja2 import Template
from pydantic import BaseModel, ConfigDict

from .models import Release
from .shell import capture, fatal

TEMPLATE = Path(__file__).parent / "templates" / "release_announcement_draft.md.j2"

# Days between a release candidate and the planned final release.
RC_REVIEW_DAYS = 5


class AnnouncementVersion(BaseModel):
    """A released version as described in an announcement.

    Attributes:
        version: The version string, e.g. "7.1.3" or "7.1.3.rc1".
    """

    model_config = ConfigDict(frozen=True)

    version: str

    def __str__(self) -> str:
        return self.version

    @property
    def segments(self) -> tuple[int | str, ...]:
        """Numeric and alphabetic runs: "6.1.4.rc1" → (6, 1, 4, "rc", 1)."""
        return tuple(
            int(part) if part.isdigit() else part
            for part in re.findall(r"[0-9]+|[A-Za-z]+", self.version)
        )

    @property
    def previous(self) -> str:
        """The release this one follows: "6.1.4" → "6.1.3"."""
        major, minor, tiny = self.segments[:3]
        return f"{major}.{minor}.{tiny - 1}"

    @property
    def major_or_security(self) -> bool:
        """True for x.y.0 releases and four-number security releases."""
        segments = self.segments
        return segments[2] == 0 or (len(segments) > 3 and isinstance(segments[3], int))

    @property
    def rc(self) -> bool:
        return "rc" in self.version


def requested_versions(release: Release) -> list[AnnouncementVersion]:
    """Versions to announce: $VERSIONS (comma-separated) or the current one."""
    raw = os.environ.get("VERSIONS")
    if raw:
        names = [v.strip() for v in raw.split(",") if v.strip()]
    else:
        names = [str(release.version)]
    return [AnnouncementVersion(version=v) for v in sorted(names)]


def final_release_date(today: date) -> date:
    """Date an RC becomes final: five days out, moved off the weekend."""
    target = today + timedelta(days=RC_REVIEW_DAYS)
    while target.weekday() >= 5:
        target += timedelta(days=1)
    return target


def checksums(
    release: Release, versions: list[AnnouncementVersion]
) -> list[tuple[str, str]]:
    """SHA-256 digests of the built gems for the announced versions."""
    sums: list[tuple[str, str]] = []
    for version in versions:
        for gem in sorted(release.output_dir.glob(f"*-{version}.gem")):
            sums.append((hashlib.sha256(gem.read_bytes()).hexdigest(), gem.name))
    return sums


def render_announcement(release: Release, today: date | None = None) -> str:
    """Render the announcement draft for the requested versions.

    Raises:
        SystemExit: If any version is not a patch release.
    """
    versions = requested_versions(release)
    if any(v.major_or_security for v in versions):
        fatal("Only valid for patch releases")

    future_date = None
    github_user = None
    if any(v.rc for v in versions):
        future_date = final_release_date(today or date.today())
        github_user = capture("git", "config", "github.user")

    config = release.config
    if config.announcement_template:
        template_path = release.root / config.announcement_template
    else:
        template_path = TEMPLATE
    template = Template(
        template_path.read_text(),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return template.render(
        product=config.product,
        version=AnnouncementVersion(version=str(release.version)),
        versions=versions,
        future_date=future_date,
        github_user=github_user,
        checksums=checksums(release, versions),
    )


def announce(release: Release, today: date | None = None) -> None:
    """Print the announcement draft."""
    click.echo(render_announcement(release, today))
