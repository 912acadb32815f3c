"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from rails_release.config import load_release
from rails_release.models import FRAMEWORKS, Release

GEM_VERSION_RB = """\
# frozen_string_literal: true

module ActiveSupport
  # Returns the currently loaded version as a +Gem::Version+.
  def self.gem_version
    Gem::Version.new VERSION::STRING
  end

  module VERSION
    MAJOR = 7
    MINOR = 1
    TINY  = 1
    PRE   = nil

    STRING = [MAJOR, MINOR, TINY, PRE].compact.join(".")
  end
end
"""

CHANGELOG = """\
*   Fix `to_sentence` with an empty array.

    *Jane Doe*

*   Add `Object#with`.

## Rails 7.1.1 (October 11, 2023) ##

*   Older entry.

Please check [7-0-stable](https://github.com/rails/rails/blob/7-0-stable/CHANGELOG.md) for previous changes.
"""


@pytest.fixture
def rails_repo(tmp_path: Path) -> Path:
    """Create a minimal Rails checkout releasing 7.1.2."""
    root = tmp_path / "rails"
    root.mkdir()
    (root / "RAILS_VERSION").write_text("7.1.2\n")
    (root / "version.rb").write_text(GEM_VERSION_RB)

    for name in FRAMEWORKS:
        lib = root / name / "lib" / name
        lib.mkdir(parents=True)
        (lib / "gem_version.rb").write_text(GEM_VERSION_RB)
        (root / name / "CHANGELOG.md").write_text(CHANGELOG)

    (root / "guides").mkdir()
    (root / "guides" / "CHANGELOG.md").write_text(CHANGELOG)

    (root / "actioncable" / "package.json").write_text(
        json.dumps({"name": "@rails/actioncable", "version": "7.1.100"})
    )
    return root.resolve()


@pytest.fixture
def release(rails_repo: Path) -> Release:
    """Release context for the fixture checkout."""
    return load_release(rails_repo)


@pytest.fixture
def gem_version_rb() -> str:
    """Contents of a gem_version.rb for 7.1.1."""
    return GEM_VERSION_RB
