"""Version parsing and rewriting utilities.

Handles the release version read from the version file, its npm
equivalent, and the version constants embedded in each gem's Ruby sources.
"""

from __future__ import annotations

import re

import semver

from .models import ReleaseVersion
from .shell import fatal

PRE_RELEASE_MARKERS = ("rc", "beta", "alpha")

# Constant name -> padding after the name, so the "=" signs line up.
VERSION_CONSTANTS = {"MAJOR": "", "MINOR": "", "TINY": " ", "PRE": "  "}


def parse_version(version_str: str) -> ReleaseVersion:
    """Parse a version string into a ReleaseVersion.

    Splits into at most four parts; anything after the third dot is kept
    as the pre-release segment:
    - "7.1.2" → 7, 1, 2, None
    - "7.1.0.rc1" → 7, 1, 0, "rc1"
    - "5.0.0.beta1.1" → 5, 0, 0, "beta1.1"

    Raises:
        SystemExit: If major, minor or tiny is missing or not a number.
    """
    parts = version_str.split(".", 3)
    if len(parts) < 3 or not all(p.isdigit() for p in parts[:3]):
        fatal(f"Invalid version {version_str!r}: expected MAJOR.MINOR.TINY[.PRE]")
    major, minor, tiny = (int(p) for p in parts[:3])
    pre = parts[3] if len(parts) == 4 else None
    return ReleaseVersion(major=major, minor=minor, tiny=tiny, pre=pre)


def leading_int(value: str) -> int:
    """Parse the leading digits of a string, 0 if there are none.

    Examples:
        "1" → 1
        "12abc" → 12
        "rc1" → 0
    """
    match = re.match(r"\d+", value)
    return int(match.group()) if match else 0


def pre_release(version: ReleaseVersion) -> str | None:
    """Return the pre segment if it marks a pre-release (rc, beta, alpha)."""
    if version.pre and any(marker in version.pre for marker in PRE_RELEASE_MARKERS):
        return version.pre
    return None


def npm_version(version: ReleaseVersion) -> str:
    """Convert a release version into an npm-compatible semver string.

    npm cannot express a fourth version component, so the tiny number is
    scaled by 100 to make room for a numeric pre segment, and pre-release
    markers become a semver pre-release suffix:

        "5.0.0"         → "5.0.0"
        "5.0.1"         → "5.0.100"
        "5.0.0.1"       → "5.0.1"
        "5.0.1.1"       → "5.0.101"
        "5.0.0.rc1"     → "5.0.0-rc1"
        "5.0.0.beta1.1" → "5.0.0-beta1.1"
    """
    offset = leading_int(version.pre) if version.pre else 0
    return str(
        semver.Version(
            version.major,
            version.minor,
            version.tiny * 100 + offset,
            prerelease=pre_release(version),
        )
    )


def ruby_pre(version: ReleaseVersion) -> str:
    """Ruby literal for the PRE constant: a quoted string or nil."""
    return f'"{version.pre}"' if version.pre else "nil"


def rewrite_version_constants(
    source: str, version: ReleaseVersion, filename: str
) -> str:
    """Rewrite the MAJOR/MINOR/TINY/PRE assignments in a Ruby version file.

    Leading indentation of each assignment is preserved.

    Raises:
        SystemExit: If any of the four assignments is missing.
    """
    values = {
        "MAJOR": str(version.major),
        "MINOR": str(version.minor),
        "TINY": str(version.tiny),
        "PRE": ruby_pre(version),
    }
    for name, padding in VERSION_CONSTANTS.items():
        pattern = re.compile(rf"^([ \t]*){name}[ \t]*= .*$", re.MULTILINE)
        replacement = f"{name}{padding} = {values[name]}"
        source, count = pattern.subn(lambda m: m.group(1) + replacement, source)
        if not count:
            fatal(f"Could not insert {name} in {filename}")
    return source
