"""
releaser package

This package implements foundry-release, a CLI that builds, versions and
publishes a content module.

Key responsibilities are split across modules:
- `versioning.py`: resolve the next version and derive the release URLs
- `manifest.py`: read/update/write `module.json`
- `jsonfmt.py`: stable compact JSON layout for the manifest
- `config.py`: load `foundryconfig.json` into an explicit config record
- `staging.py`: copy statics into dist/, clean, package, link, watch
- `git.py`: commit and tag releases
- `cli.py`: CLI entrypoint and orchestration
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
