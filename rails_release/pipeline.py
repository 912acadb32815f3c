"""Release pipeline: check → changelog → build → commit → tag → push.

This module orchestrates a full release of the suite:
1. Refuse to run on a dirty tree or an already released version
2. Add a dated header to every changelog
3. Build every gem, in dependency order, umbrella last
4. Verify the dependency lockfile
5. Commit the release bookkeeping (the editor opens to confirm)
6. Create and push a signed release tag
7. Push every gem (and npm package) to the registries

Packages are always processed in configured order because later packages
depend on earlier ones having been built and installed.
"""

from __future__ import annotations

import os
from pathlib import PurePosixPath

from .changelog import write_header
from .models import Release
from .packages import build, install, push, update_versions
from .shell import fatal, git, run, step


def build_all(release: Release) -> None:
    """Build every package's gem."""
    step(f"Building {len(release.packages)} packages")
    for fw in release.packages:
        build(release, fw)


def update_versions_all(release: Release) -> None:
    """Write the release version into every package."""
    step(f"Updating versions to {release.version}")
    for fw in release.packages:
        update_versions(release, fw)


def install_all(release: Release, *, built: bool = False) -> None:
    """Install every package's gem, building them first unless `built`."""
    step(f"Installing {len(release.packages)} packages")
    for fw in release.packages:
        install(release, fw, built=built)


def push_all(release: Release, *, built: bool = False) -> None:
    """Publish every package, building them first unless `built`."""
    step(f"Pushing {len(release.packages)} packages")
    for fw in release.packages:
        push(release, fw, built=built)


def dirty_paths() -> list[str]:
    """Paths with uncommitted changes, as reported by `git status`."""
    paths: list[str] = []
    for line in git("status", "--porcelain").splitlines():
        # "XY path" or "R  old -> new"; the leading space of the first
        # entry may have been stripped
        _, _, path = line.strip().partition(" ")
        path = path.strip().split(" -> ")[-1]
        paths.append(path.strip('"'))
    return paths


def is_allowlisted(path: str, patterns: list[str]) -> bool:
    """Check a path against release bookkeeping globs.

    Patterns match the trailing components of the path, so "CHANGELOG.md"
    matches "activerecord/CHANGELOG.md" but not "CHANGELOG.md.orig".
    """
    return any(PurePosixPath(path).match(pattern) for pattern in patterns)


def tag_exists(tag: str) -> bool:
    return tag in git("tag", "--list", tag, check=False).splitlines()


def ensure_clean_state(release: Release) -> None:
    """Abort unless the tree is clean and the release tag is new.

    Files that a release is expected to touch (versions, changelogs,
    lockfiles) may be dirty. Set SKIP_TAG to skip the tag check.
    """
    step("Checking repository state")

    unexpected = [
        path
        for path in dirty_paths()
        if not is_allowlisted(path, release.config.clean_allowlist)
    ]
    if unexpected:
        fatal(
            "[ABORTING] `git status` reports a dirty tree. "
            "Make sure all changes are committed\n"
            + "\n".join(f"  - {path}" for path in unexpected)
        )

    tag_name = release.version.tag
    if not os.environ.get("SKIP_TAG") and tag_exists(tag_name):
        fatal(
            f"[ABORTING] `git tag` shows that {tag_name} already exists. "
            "Has this version already\n"
            "           been released? Git tagging can be skipped by setting SKIP_TAG=1"
        )

    print(f"  Clean, {tag_name} not yet released")


def check_bundle(release: Release) -> None:
    """Verify the dependency lockfile is up to date."""
    step("Checking dependencies")
    result = run(*release.config.lock_check, cwd=release.root, check=False)
    if result.returncode != 0:
        fatal(f"`{' '.join(release.config.lock_check)}` failed")


def commit_message(release: Release) -> str:
    return (
        f"# Preparing for {release.version} release\n"
        "\n"
        "# UNCOMMENT THE LINE ABOVE TO APPROVE THIS COMMIT\n"
    )


def commit(release: Release) -> None:
    """Commit all pending changes, confirming the message in the editor.

    The message template is fully commented out, so git aborts the
    commit unless the first line is uncommented.
    """
    step("Committing release")
    if not git("status", "--porcelain"):
        print("  No changes to commit")
        return

    message = release.output_dir / "commit_message.txt"
    message.parent.mkdir(parents=True, exist_ok=True)
    message.write_text(commit_message(release))
    try:
        git("add", ".")
        result = run("git", "commit", "--verbose", f"--template={message}", check=False)
        if result.returncode != 0:
            fatal("Commit aborted")
    finally:
        message.unlink(missing_ok=True)

    print("  Committed")


def tag(release: Release) -> None:
    """Push the release commit, then create and push a signed tag."""
    tag_name = release.version.tag
    step(f"Tagging {tag_name}")
    run("git", "push")
    run("git", "tag", "-s", "-m", f"{tag_name} release", tag_name)
    run("git", "push", "--tags")


def prep_release(release: Release) -> None:
    """Check state, add changelog headers, build everything, check bundle."""
    ensure_clean_state(release)
    write_header(release)
    build_all(release)
    check_bundle(release)


def run_release(release: Release) -> None:
    """Execute the full release: prepare, commit, tag and publish."""
    prep_release(release)
    commit(release)
    tag(release)
    # Gems were built by prep_release
    push_all(release, built=True)

    print(f"\n{'=' * 60}\nReleased {release.version}\n{'=' * 60}")
