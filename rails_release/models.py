"""Data models for rails-release.

These Pydantic models represent the core data structures used throughout
the release tasks.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Order dependent. E.g. Action Mailbox depends on Active Record so it must
# come after it.
FRAMEWORKS = [
    "activesupport",
    "activemodel",
    "activerecord",
    "actionview",
    "actionpack",
    "activejob",
    "actionmailer",
    "actioncable",
    "activestorage",
    "actionmailbox",
    "actiontext",
    "railties",
]

CLEAN_ALLOWLIST = [
    "RAILS_VERSION",
    "CHANGELOG.md",
    "Gemfile.lock",
    "package.json",
    "version.rb",
    "gem_version.rb",
    "tasks/release.rb",
    "release.toml",
]


class ReleaseConfig(BaseModel):
    """Release settings, read from an optional release.toml at the repo root.

    Attributes:
        product: Product name used in changelog headers and announcements.
        version_file: File holding the dotted version being released.
        frameworks: Sub-packages in dependency order (dependencies first).
        umbrella: Name of the umbrella package released after all frameworks.
        extra_changelogs: Directories whose changelogs get a header but
            which are not released as packages.
        output_dir: Directory that collects built gems.
        clean_allowlist: Path globs that may be dirty when releasing.
        lock_check: Command verifying the dependency lockfile.
        gem_otp_account: ykman OATH account used for RubyGems pushes.
        npm_otp_account: ykman OATH account used for npm publishes.
        announcement_template: Optional template path overriding the bundled one.
    """

    model_config = ConfigDict(extra="forbid")

    product: str = "Rails"
    version_file: str = "RAILS_VERSION"
    frameworks: list[str] = Field(default_factory=lambda: list(FRAMEWORKS))
    umbrella: str = "rails"
    extra_changelogs: list[str] = Field(default_factory=lambda: ["guides"])
    output_dir: str = "pkg"
    clean_allowlist: list[str] = Field(default_factory=lambda: list(CLEAN_ALLOWLIST))
    lock_check: list[str] = Field(default_factory=lambda: ["bundle", "check"])
    gem_otp_account: str = "rubygems.org"
    npm_otp_account: str = "npmjs.com"
    announcement_template: str | None = None

    @field_validator("frameworks")
    @classmethod
    def _require_frameworks(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one framework is required")
        return value

    @property
    def packages(self) -> list[str]:
        """All released packages: frameworks first, then the umbrella."""
        return [*self.frameworks, self.umbrella]


class ReleaseVersion(BaseModel):
    """A release version of the form MAJOR.MINOR.TINY[.PRE].

    PRE is kept verbatim, so "5.0.0.beta1.1" has pre="beta1.1".
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    tiny: int = Field(ge=0)
    pre: str | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.tiny}"
        return f"{base}.{self.pre}" if self.pre else base

    @property
    def tag(self) -> str:
        return f"v{self}"


class Framework(BaseModel):
    """A single releasable package of the suite and its on-disk artifacts.

    Attributes:
        name: Package name, also the gem name and directory name.
        root: Absolute path of the repository root.
        version: Version string being released.
        output_dir: Directory (relative to root) that collects built gems.
        umbrella: True for the umbrella package, which lives at the root.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    root: Path
    version: str
    output_dir: str = "pkg"
    umbrella: bool = False

    @property
    def directory(self) -> Path:
        return self.root / self.name

    @property
    def build_dir(self) -> Path:
        """Directory `gem build` runs in."""
        return self.root if self.umbrella else self.directory

    @property
    def gem_file(self) -> str:
        return f"{self.name}-{self.version}.gem"

    @property
    def gem_path(self) -> Path:
        return self.root / self.output_dir / self.gem_file

    @property
    def gemspec(self) -> str:
        return f"{self.name}.gemspec"

    @property
    def version_glob(self) -> str:
        """Glob locating the Ruby file holding the version constants."""
        if self.umbrella:
            return str(self.root / "version.rb")
        return str(self.directory / "lib" / "*" / "gem_version.rb")

    @property
    def package_json(self) -> Path:
        return self.directory / "package.json"


class Release(BaseModel):
    """Everything a release task needs: where, what, and which version.

    Attributes:
        root: Absolute path of the repository root.
        config: Release settings.
        version: Version being released.
    """

    model_config = ConfigDict(frozen=True)

    root: Path
    config: ReleaseConfig
    version: ReleaseVersion

    @property
    def output_dir(self) -> Path:
        return self.root / self.config.output_dir

    def framework(self, name: str) -> Framework:
        return Framework(
            name=name,
            root=self.root,
            version=str(self.version),
            output_dir=self.config.output_dir,
            umbrella=name == self.config.umbrella,
        )

    @property
    def packages(self) -> list[Framework]:
        """Every released package in release order, umbrella last."""
        return [self.framework(name) for name in self.config.packages]
