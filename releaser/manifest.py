"""
manifest.py

Responsibility: Read, update and write the module manifest (`module.json`).

The manifest is read at the start of an update, changed in memory and
written back in one go at the end. It is serialized with `dumps_compact`
(tab indent, 35 column wrap) so successive releases diff cleanly.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from releaser.config import ReleaseConfig
from releaser.errors import ManifestFormatError, ManifestWriteError, MissingManifestError
from releaser.jsonfmt import dumps_compact
from releaser.versioning import apply_version, resolve_version

logger = logging.getLogger(__name__)

MANIFEST_MAX_LENGTH = 35
MANIFEST_INDENT = "\t"


@dataclass
class Manifest:
    path: Path
    data: dict[str, Any]

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def version(self) -> str:
        return str(self.data.get("version") or "")


def load_manifest(project_root: str | Path, name: str = "module.json") -> Manifest:
    path = Path(project_root) / name
    if not path.is_file():
        raise MissingManifestError(f"Manifest JSON not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestFormatError(f"Manifest {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ManifestFormatError(f"Manifest {path} must contain a JSON object.")
    return Manifest(path=path, data=data)


def render_manifest(data: dict[str, Any]) -> str:
    return dumps_compact(data, max_length=MANIFEST_MAX_LENGTH, indent=MANIFEST_INDENT)


def save_manifest(manifest: Manifest) -> None:
    """
    Replace the manifest file in one step.

    The new content goes to a temp file next to the manifest, which is then
    renamed over it, so the old manifest survives any failed write.
    """
    content = render_manifest(manifest.data)
    try:
        tmp = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=str(manifest.path.parent),
            prefix=f".{manifest.path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as e:
        raise ManifestWriteError(f"Could not write manifest {manifest.path}: {e}") from e
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(content)
        if manifest.path.exists():
            shutil.copymode(manifest.path, tmp_path)
        os.replace(tmp_path, manifest.path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ManifestWriteError(f"Could not write manifest {manifest.path}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def update_manifest(config: ReleaseConfig, request: str | None) -> str:
    """
    Bump the manifest version per `request` and rewrite its URLs.

    Returns the new version. Nothing is written unless every check passes.
    """
    repository = config.require_repository()
    manifest = load_manifest(config.project_root, config.manifest_name)

    target = resolve_version(request, manifest.version)
    logger.info("Updating version number to '%s'", target)

    manifest.data = apply_version(
        manifest.data,
        target,
        repository,
        manifest_name=config.manifest_name,
        artifact_name=config.artifact_name,
    )
    save_manifest(manifest)
    logger.debug("Wrote %s", manifest.path)
    return target
