"""Per-package release tasks: clean → update versions → build → install | push.

Every released package (each framework plus the umbrella gem) gets the same
set of tasks. `package_tasks()` maps package names to their task set.
"""

from __future__ import annotations

import glob
import json
import re
import shutil
from functools import partial
from pathlib import Path
from typing import Callable, NamedTuple

from .models import Framework, Release
from .shell import capture, fatal, run, which
from .versions import npm_version, rewrite_version_constants


class PackageTasks(NamedTuple):
    """The release actions available for one package."""

    clean: Callable[[], None]
    update_versions: Callable[[], None]
    build: Callable[[], None]
    install: Callable[..., None]
    push: Callable[..., None]


def clean(fw: Framework) -> None:
    """Remove a previously built gem, if any."""
    fw.gem_path.unlink(missing_ok=True)


def find_version_file(fw: Framework) -> Path:
    """Locate the Ruby file holding the package's version constants.

    Raises:
        SystemExit: If the glob matches no file or more than one.
    """
    matches = sorted(glob.glob(fw.version_glob))
    if not matches:
        fatal(f"Could not find version file for {fw.name} ({fw.version_glob})")
    if len(matches) > 1:
        fatal(f"Version file for {fw.name} matched multiple files: {matches}")
    return Path(matches[0])


def update_versions(release: Release, fw: Framework) -> None:
    """Write the release version into the package's version constants.

    Also updates package.json through npm when the package ships one and
    its recorded version differs from the npm-compatible version.
    """
    path = find_version_file(fw)
    path.write_text(
        rewrite_version_constants(path.read_text(), release.version, str(path))
    )
    print(f"  {fw.name}: {path.relative_to(fw.root)} → {release.version}")

    if not fw.package_json.exists():
        return

    target = npm_version(release.version)
    current = json.loads(fw.package_json.read_text()).get("version")
    if current == target:
        return

    if not which("npm"):
        fatal(f"You must have npm installed to release {release.config.product}.")

    result = run(
        "npm", "version", target, "--no-git-tag-version", cwd=fw.directory, check=False
    )
    if result.returncode != 0:
        fatal(f"Failed to set npm version {target} for {fw.name}")
    print(f"  {fw.name}: package.json {current} → {target}")


def build_gem(fw: Framework) -> None:
    """Build the gem and move it into the shared output directory."""
    fw.gem_path.parent.mkdir(parents=True, exist_ok=True)

    result = run("gem", "build", fw.gemspec, cwd=fw.build_dir, check=False)
    if result.returncode != 0:
        fatal(f"Failed to build {fw.name}")

    shutil.move(str(fw.build_dir / fw.gem_file), str(fw.gem_path))


def build(release: Release, fw: Framework) -> None:
    """Clean, update versions, then build the package's gem."""
    print(f"\n  {fw.name} ({fw.gem_file})")
    clean(fw)
    update_versions(release, fw)
    build_gem(fw)


def install(release: Release, fw: Framework, *, built: bool = False) -> None:
    """Install the package's gem locally, building it first unless `built`."""
    if not built:
        build(release, fw)

    result = run("gem", "install", "--pre", str(fw.gem_path), check=False)
    if result.returncode != 0:
        fatal(f"Failed to install {fw.gem_file}")


def otp_args(account: str) -> list[str]:
    """Return ["--otp", code] from a YubiKey, or [] if no code is available."""
    code = capture("ykman", "oath", "accounts", "code", "-s", account)
    return ["--otp", code] if code else []


def npm_dist_tag(version: str) -> str:
    """npm dist-tag for a version: "pre" for pre-releases, else "latest"."""
    return "pre" if re.search(r"[a-z]", version) else "latest"


def push(release: Release, fw: Framework, *, built: bool = False) -> None:
    """Publish the gem to RubyGems, and to npm if the package ships one.

    Builds first unless `built`. One-time passwords are added when ykman
    can provide them; the push proceeds without one otherwise.
    """
    if not built:
        build(release, fw)

    config = release.config
    result = run(
        "gem", "push", str(fw.gem_path), *otp_args(config.gem_otp_account), check=False
    )
    if result.returncode != 0:
        fatal(f"Failed to push {fw.gem_file}")

    if not fw.package_json.exists():
        return

    result = run(
        "npm",
        "publish",
        "--tag",
        npm_dist_tag(fw.version),
        *otp_args(config.npm_otp_account),
        cwd=fw.directory,
        check=False,
    )
    if result.returncode != 0:
        fatal(f"Failed to publish {fw.name} to npm")


def package_tasks(release: Release) -> dict[str, PackageTasks]:
    """Map each released package name to its tasks, in release order."""
    tasks: dict[str, PackageTasks] = {}
    for fw in release.packages:
        tasks[fw.name] = PackageTasks(
            clean=partial(clean, fw),
            update_versions=partial(update_versions, release, fw),
            build=partial(build, release, fw),
            install=partial(install, release, fw),
            push=partial(push, release, fw),
        )
    return tasks
