"""Release configuration loading.

Uses tomlkit to read the optional release.toml at the repository root.
Every key is optional; missing keys fall back to the Rails layout.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from pydantic import ValidationError

from .models import Release, ReleaseConfig, ReleaseVersion
from .shell import fatal
from .versions import parse_version

CONFIG_FILE = "release.toml"


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file."""
    return tomlkit.parse(path.read_text())


def load_config(root: Path) -> ReleaseConfig:
    """Build the release configuration for the repo at `root`.

    Raises:
        SystemExit: If release.toml is malformed, or has unknown keys or
            invalid values.
    """
    path = root / CONFIG_FILE
    if not path.exists():
        return ReleaseConfig()

    try:
        # unwrap() turns tomlkit containers into plain dicts and lists
        data = load_toml(path).unwrap()
        return ReleaseConfig.model_validate(data)
    except (TOMLKitError, ValidationError) as exc:
        fatal(f"Invalid {CONFIG_FILE}:\n{exc}")


def read_version(root: Path, config: ReleaseConfig) -> ReleaseVersion:
    """Read the version being released from the version descriptor file."""
    path = root / config.version_file
    if not path.exists():
        fatal(f"Version file {config.version_file} not found in {root}")
    return parse_version(path.read_text().strip())


def load_release(root: Path | None = None) -> Release:
    """Load configuration and version for the repo at `root` (default: cwd)."""
    root = (root or Path.cwd()).resolve()
    config = load_config(root)
    return Release(root=root, config=config, version=read_version(root, config))
