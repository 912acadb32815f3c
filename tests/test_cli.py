"""Tests for rails_release.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from rails_release.cli import cli


@pytest.fixture
def runner(rails_repo: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """CliRunner operating from the fixture checkout."""
    monkeypatch.chdir(rails_repo)
    monkeypatch.delenv("VERSIONS", raising=False)
    return CliRunner()


def test_version_shows_npm_equivalent(runner: CliRunner) -> None:
    """Prints the release version and its npm form."""
    result = runner.invoke(cli, ["version"])

    assert result.exit_code == 0
    assert result.output == "7.1.2 (npm: 7.1.200)\n"


def test_unknown_package_is_rejected(runner: CliRunner) -> None:
    """Unknown packages are a usage error."""
    result = runner.invoke(cli, ["build", "activefoo"])

    assert result.exit_code == 2
    assert "'activefoo' is not one of: activesupport" in result.output


@patch("rails_release.packages.build")
def test_build_single_package(mock_build: MagicMock, runner: CliRunner) -> None:
    """Builds only the named package."""
    result = runner.invoke(cli, ["build", "actiontext"])

    assert result.exit_code == 0
    release, fw = mock_build.call_args.args
    assert fw.name == "actiontext"
    assert str(release.version) == "7.1.2"


def test_update_versions_single_package(runner: CliRunner, rails_repo: Path) -> None:
    """Rewrites the named package's version file."""
    result = runner.invoke(cli, ["update-versions", "rails"])

    assert result.exit_code == 0
    assert "    TINY  = 2\n" in (rails_repo / "version.rb").read_text()


@patch("rails_release.cli.build_all")
def test_all_build(mock_build_all: MagicMock, runner: CliRunner) -> None:
    """Builds every package."""
    result = runner.invoke(cli, ["all", "build"])

    assert result.exit_code == 0
    mock_build_all.assert_called_once()


@patch("rails_release.cli.run_release")
def test_all_release(mock_run_release: MagicMock, runner: CliRunner) -> None:
    """Runs the full release."""
    result = runner.invoke(cli, ["all", "release"])

    assert result.exit_code == 0
    mock_run_release.assert_called_once()


@patch("rails_release.cli.release_summary")
def test_summary_with_both_arguments(
    mock_summary: MagicMock, runner: CliRunner
) -> None:
    """Passes the base release and the label."""
    result = runner.invoke(cli, ["changelog", "summary", "7.1.0", "Rails 7.1.2"])

    assert result.exit_code == 0
    _, base_release, release_label = mock_summary.call_args.args
    assert (base_release, release_label) == ("7.1.0", "Rails 7.1.2")


@patch("rails_release.cli.release_summary")
def test_summary_with_release_only(
    mock_summary: MagicMock, runner: CliRunner
) -> None:
    """A single argument is the release label."""
    result = runner.invoke(cli, ["changelog", "summary", "Rails 7.1.2"])

    assert result.exit_code == 0
    _, base_release, release_label = mock_summary.call_args.args
    assert (base_release, release_label) == (None, "Rails 7.1.2")


def test_changelog_header(runner: CliRunner, rails_repo: Path) -> None:
    """Writes headers into the changelogs."""
    result = runner.invoke(cli, ["changelog", "header"])

    assert result.exit_code == 0
    assert (rails_repo / "guides" / "CHANGELOG.md").read_text().startswith(
        "## Rails 7.1.2 ("
    )


def test_announce_rejects_minor_release(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Announcing a minor release exits with an error."""
    monkeypatch.setenv("VERSIONS", "7.1.0")

    result = runner.invoke(cli, ["announce"])

    assert result.exit_code == 1
    assert "Only valid for patch releases" in result.output


def test_announce_prints_draft(runner: CliRunner) -> None:
    """Prints the announcement draft to stdout."""
    result = runner.invoke(cli, ["announce"])

    assert result.exit_code == 0
    assert result.output.startswith("Hi everyone,\n")
    assert "Rails 7.1.2 has been released." in result.output


def test_package_names_come_from_release_toml(
    runner: CliRunner, rails_repo: Path
) -> None:
    """Packages configured in release.toml are accepted, defaults are not."""
    (rails_repo / "release.toml").write_text(
        'frameworks = ["activesupport"]\numbrella = "rails"\n'
    )

    result = runner.invoke(cli, ["clean", "activerecord"])

    assert result.exit_code == 2
    assert "'activerecord' is not one of: activesupport, rails" in result.output
    assert runner.invoke(cli, ["clean", "activesupport"]).exit_code == 0
