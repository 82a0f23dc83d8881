import json
from pathlib import Path

import pytest

REPO = "https://github.com/owner/my-module"


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A minimal module project: manifest, config and a few statics."""
    root = tmp_path / "my-module"
    root.mkdir()
    (root / "module.json").write_text(
        json.dumps({"name": "my-module", "title": "My Module", "version": "1.4.9"}),
        encoding="utf-8",
    )
    (root / "foundryconfig.json").write_text(
        json.dumps({"repository": REPO, "rawURL": "https://raw.githubusercontent.com/owner/my-module"}),
        encoding="utf-8",
    )
    (root / "README.md").write_text("# My Module\n", encoding="utf-8")
    (root / "packs").mkdir()
    (root / "packs" / "items.db").write_text("{}\n", encoding="utf-8")
    (root / "packs" / "sub").mkdir()
    (root / "packs" / "sub" / "spells.db").write_text("{}\n", encoding="utf-8")
    return root
