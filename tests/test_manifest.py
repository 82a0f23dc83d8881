import json
import os
import stat
from pathlib import Path

import pytest

from releaser import manifest as manifest_mod
from releaser.config import load_config
from releaser.errors import (
    InvalidVersionArgumentError,
    ManifestFormatError,
    ManifestWriteError,
    MissingConfigurationError,
    MissingManifestError,
    NoOpVersionError,
)
from releaser.manifest import load_manifest, render_manifest, update_manifest

REPO = "https://github.com/owner/my-module"


def test_update_rewrites_version_and_urls(project: Path):
    config = load_config(project_root=project)

    assert update_manifest(config, "minor") == "1.5.0"

    text = (project / "module.json").read_text(encoding="utf-8")
    assert text == (
        "{\n"
        '\t"name": "my-module",\n'
        '\t"title": "My Module",\n'
        '\t"version": "1.5.0",\n'
        f'\t"url": "{REPO}",\n'
        f'\t"manifest": "{REPO}/releases/latest/download/module.json",\n'
        f'\t"download": "{REPO}/releases/download/v1.5.0/module.zip"\n'
        "}"
    )


def test_update_twice_is_stable(project: Path):
    config = load_config(project_root=project)
    update_manifest(config, "patch")
    first = (project / "module.json").read_text(encoding="utf-8")
    update_manifest(config, "1.5.0")
    update_manifest(config, "1.4.10")
    second = (project / "module.json").read_text(encoding="utf-8")
    assert first == second


@pytest.mark.parametrize(
    "request_, error",
    [("1.4.9", NoOpVersionError), ("bogus", InvalidVersionArgumentError)],
)
def test_failed_update_leaves_manifest_untouched(project: Path, request_, error):
    before = (project / "module.json").read_text(encoding="utf-8")
    with pytest.raises(error):
        update_manifest(load_config(project_root=project), request_)
    assert (project / "module.json").read_text(encoding="utf-8") == before


def test_update_requires_repository_urls(project: Path):
    (project / "foundryconfig.json").write_text(json.dumps({"repository": REPO}), encoding="utf-8")
    with pytest.raises(MissingConfigurationError):
        update_manifest(load_config(project_root=project), "patch")


def test_missing_manifest(project: Path):
    (project / "module.json").unlink()
    with pytest.raises(MissingManifestError):
        update_manifest(load_config(project_root=project), "patch")


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_malformed_manifest(project: Path, content):
    (project / "module.json").write_text(content, encoding="utf-8")
    with pytest.raises(ManifestFormatError):
        load_manifest(project)


def test_render_round_trips(project: Path):
    manifest = load_manifest(project)
    assert json.loads(render_manifest(manifest.data)) == manifest.data
    assert manifest.version == "1.4.9"


def test_failed_write_keeps_original_manifest(project: Path, monkeypatch):
    before = (project / "module.json").read_bytes()

    def broken_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(manifest_mod.os, "replace", broken_replace)
    with pytest.raises(ManifestWriteError):
        update_manifest(load_config(project_root=project), "patch")

    assert (project / "module.json").read_bytes() == before
    assert sorted(p.name for p in project.iterdir() if p.name.endswith(".tmp")) == []


def test_write_keeps_file_mode(project: Path):
    path = project / "module.json"
    os.chmod(path, 0o644)
    update_manifest(load_config(project_root=project), "patch")
    assert stat.S_IMODE(path.stat().st_mode) == 0o644
    assert [p.name for p in project.iterdir() if p.name.endswith(".tmp")] == []
