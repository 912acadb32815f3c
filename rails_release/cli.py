"""CLI entry point for rails-release."""

from __future__ import annotations

import click

from .announce import announce as draft_announcement
from .changelog import release_summary, write_header
from .config import load_release
from .packages import PackageTasks, package_tasks
from .pipeline import (
    build_all,
    check_bundle,
    commit,
    ensure_clean_state,
    install_all,
    prep_release,
    push_all,
    run_release,
    tag,
    update_versions_all,
)
from .versions import npm_version


@click.group()
@click.version_option()
def cli() -> None:
    """Release tasks for the Rails frameworks: version, build, publish, announce."""


def _tasks_for(package: str) -> PackageTasks:
    tasks = package_tasks(load_release())
    if package not in tasks:
        raise click.BadParameter(
            f"{package!r} is not one of: {', '.join(tasks)}", param_hint="PACKAGE"
        )
    return tasks[package]


@cli.command()
@click.argument("package")
def clean(package: str) -> None:
    """Remove PACKAGE's previously built gem."""
    _tasks_for(package).clean()


@cli.command("update-versions")
@click.argument("package")
def update_versions(package: str) -> None:
    """Write the release version into PACKAGE."""
    _tasks_for(package).update_versions()


@cli.command()
@click.argument("package")
def build(package: str) -> None:
    """Clean, update versions and build PACKAGE's gem."""
    _tasks_for(package).build()


@cli.command()
@click.argument("package")
def install(package: str) -> None:
    """Build and install PACKAGE's gem locally."""
    _tasks_for(package).install()


@cli.command()
@click.argument("package")
def push(package: str) -> None:
    """Build and publish PACKAGE to RubyGems (and npm)."""
    _tasks_for(package).push()


@cli.command()
def version() -> None:
    """Show the version being released and its npm equivalent."""
    release = load_release()
    click.echo(f"{release.version} (npm: {npm_version(release.version)})")


@cli.group("all")
def all_() -> None:
    """Tasks that run across every package."""


@all_.command("build")
def all_build() -> None:
    """Build every gem."""
    build_all(load_release())


@all_.command("update-versions")
def all_update_versions() -> None:
    """Write the release version into every package."""
    update_versions_all(load_release())


@all_.command("install")
def all_install() -> None:
    """Build and install every gem."""
    install_all(load_release())


@all_.command("push")
def all_push() -> None:
    """Build and publish every package."""
    push_all(load_release())


@all_.command("ensure-clean-state")
def all_ensure_clean_state() -> None:
    """Abort on a dirty tree or an existing release tag."""
    ensure_clean_state(load_release())


@all_.command("bundle")
def all_bundle() -> None:
    """Verify the dependency lockfile."""
    check_bundle(load_release())


@all_.command("commit")
def all_commit() -> None:
    """Commit pending release changes after confirming in the editor."""
    commit(load_release())


@all_.command("tag")
def all_tag() -> None:
    """Push, then create and push the signed release tag."""
    tag(load_release())


@all_.command("prep-release")
def all_prep_release() -> None:
    """Check state, add changelog headers, build everything, check bundle."""
    prep_release(load_release())


@all_.command("release")
def all_release() -> None:
    """Prepare, commit, tag and publish the release."""
    run_release(load_release())


@cli.group()
def changelog() -> None:
    """Changelog maintenance."""


@changelog.command()
def header() -> None:
    """Add a dated release header to every changelog."""
    write_header(load_release())


@changelog.command()
@click.argument("base_release", required=False)
@click.argument("release_label", metavar="RELEASE", required=False)
def summary(base_release: str | None, release_label: str | None) -> None:
    """Print every framework's changes since BASE_RELEASE.

    With a single argument it is used as the RELEASE title and the
    summary stops at the previous release of any version.
    """
    if release_label is None:
        base_release, release_label = None, base_release
    release_summary(load_release(), base_release, release_label)


@cli.command()
def announce() -> None:
    """Draft the release announcement (set VERSIONS=a,b for several)."""
    draft_announcement(load_release())
