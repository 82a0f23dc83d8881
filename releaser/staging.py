"""
staging.py

Responsibility: Assemble the distributable bundle under `dist/`.

Rules:
- Static entries are copied in sorted order; files keep their metadata.
- Entries that do not exist in the project are skipped.
- Cleaning only removes build outputs, never source files.

This module intentionally does NOT know about versions, git, or CLI parsing.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from releaser.config import ReleaseConfig
from releaser.errors import StagingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageResult:
    copied_files: int
    skipped: tuple[str, ...]


def _iter_files(root: Path) -> list[Path]:
    """
    Return all files under root in deterministic order (relative POSIX path).
    """
    if root.is_file():
        return [root]
    files: list[Path] = []
    for dirpath, _dirs, filenames in os.walk(root):
        for name in filenames:
            files.append(Path(dirpath) / name)
    files.sort(key=lambda p: p.relative_to(root).as_posix())
    return files


def copy_statics(config: ReleaseConfig) -> StageResult:
    """
    Copy the configured static files and folders into the dist folder.
    """
    root = config.project_root
    dist = config.dist_path
    copied = 0
    skipped: list[str] = []

    for entry in sorted(config.statics):
        src = root / entry
        if not src.exists():
            skipped.append(entry)
            continue
        for src_file in _iter_files(src):
            dst_file = dist / src_file.relative_to(root)
            try:
                dst_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src_file, dst_file)
            except OSError as e:
                raise StagingError(f"Could not copy {src_file} to {dst_file}: {e}") from e
            copied += 1

    logger.info("Copied %d file(s) into %s", copied, dist)
    if skipped:
        logger.debug("Skipped missing statics: %s", ", ".join(skipped))
    return StageResult(copied_files=copied, skipped=tuple(skipped))


def stale_artifacts(project_root: str | Path) -> list[str]:
    """
    Names of build outputs in dist/ that are regenerated from `src/`.

    TypeScript projects own the compiled script, templates, language files
    and manifests; Less/SASS projects own the stylesheet and fonts.
    """
    root = Path(project_root)
    name = root.resolve().name
    src = root / "src"
    names: list[str] = []

    if (src / f"{name}.ts").exists():
        names += [
            "lang",
            "templates",
            "assets",
            "module",
            f"{name}.js",
            "module.json",
            "system.json",
            "template.json",
        ]

    if (src / f"{name}.less").exists() or (src / f"{name}.scss").exists():
        names += ["fonts", f"{name}.css"]

    return names


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)


def clean(config: ReleaseConfig) -> list[Path]:
    """
    Remove built files from the dist folder while leaving source files alone.
    """
    removed: list[Path] = []
    for name in stale_artifacts(config.project_root):
        target = config.dist_path / name
        if not (target.exists() or target.is_symlink()):
            continue
        try:
            _remove(target)
        except OSError as e:
            raise StagingError(f"Could not remove {target}: {e}") from e
        removed.append(target)
    logger.info("Removed %d stale artifact(s) from %s", len(removed), config.dist_path)
    return removed


def build(config: ReleaseConfig) -> StageResult:
    clean(config)
    return copy_statics(config)


def package(config: ReleaseConfig) -> Path:
    """
    Zip the contents of the dist folder into the release artifact.

    Returns the archive path (`<project_root>/<artifact_name>`).
    """
    dist = config.dist_path
    files = _iter_files(dist) if dist.is_dir() else []
    if not files:
        raise StagingError(f"Nothing to package: {dist} is missing or empty (run `build` first)")

    archive = config.project_root / config.artifact_name
    try:
        if archive.exists():
            archive.unlink()
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in files:
                zf.write(path, path.relative_to(dist).as_posix())
    except OSError as e:
        raise StagingError(f"Could not write {archive}: {e}") from e

    logger.info("Packaged %d file(s) into %s", len(files), archive)
    return archive


def link(config: ReleaseConfig, *, force: bool = False) -> Path:
    """
    Symlink the dist folder into the application's user data modules folder.

    An existing link is replaced; any other existing entry requires `force`.
    """
    target = config.require_data_path() / "modules" / config.name
    dist = config.dist_path.resolve()

    if target.exists() and not target.is_symlink() and not force:
        raise StagingError(f"{target} already exists and is not a link (use --force to replace it)")

    try:
        if target.is_symlink() or target.exists():
            _remove(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.symlink_to(dist, target_is_directory=True)
    except OSError as e:
        raise StagingError(f"Could not link {target} -> {dist}: {e}") from e
    logger.info("Linked %s -> %s", target, dist)
    return target


def _snapshot(config: ReleaseConfig) -> dict[str, float]:
    stamps: dict[str, float] = {}
    for entry in config.statics:
        src = config.project_root / entry
        if src.exists():
            for path in _iter_files(src):
                stamps[path.as_posix()] = path.stat().st_mtime
    return stamps


def watch(
    config: ReleaseConfig,
    *,
    interval: float = 1.0,
    iterations: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Re-copy statics whenever one of them changes. Returns the number of copies.

    The first pass always copies. `iterations` bounds the number of polls;
    None means run until interrupted.
    """
    copies = 0
    previous: dict[str, float] | None = None
    polls = 0
    while iterations is None or polls < iterations:
        current = _snapshot(config)
        if current != previous:
            copy_statics(config)
            copies += 1
            previous = current
        polls += 1
        if iterations is None or polls < iterations:
            sleep(interval)
    return copies
