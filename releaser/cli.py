"""
cli.py

Responsibility: CLI entrypoint for foundry-release.

Commands:
- build:   clean stale artifacts from dist/, then copy statics into it
- clean:   remove stale artifacts from dist/
- watch:   copy statics again whenever they change
- package: zip dist/ into the release artifact
- link:    symlink dist/ into the application's data folder
- update:  bump the manifest version and rewrite its URLs
- publish: update, then git commit and tag

This module should orchestrate behavior but keep concerns isolated:
- Configuration: `config.py`
- Manifest/version: `manifest.py`, `versioning.py`
- Files: `staging.py`
- Git: `git.py`
"""

from __future__ import annotations

import argparse
import logging
import sys

from releaser import staging
from releaser.config import DEFAULT_CONFIG_NAME, ReleaseConfig, load_config, with_overrides
from releaser.errors import ReleaseError
from releaser.git import publish
from releaser.manifest import update_manifest

logger = logging.getLogger("releaser")


def _config(args: argparse.Namespace, *, required: bool) -> ReleaseConfig:
    config = load_config(args.config, project_root=args.project_root, required=required)
    return with_overrides(config, dist_dir=args.dist_dir)


def build_cmd(args: argparse.Namespace) -> int:
    staging.build(_config(args, required=False))
    return 0


def clean_cmd(args: argparse.Namespace) -> int:
    staging.clean(_config(args, required=False))
    return 0


def watch_cmd(args: argparse.Namespace) -> int:
    config = _config(args, required=False)
    logger.info("Watching %s (Ctrl+C to stop)", ", ".join(config.statics))
    try:
        staging.watch(config, interval=args.interval)
    except KeyboardInterrupt:
        logger.info("Stopped watching")
    return 0


def package_cmd(args: argparse.Namespace) -> int:
    staging.package(_config(args, required=False))
    return 0


def link_cmd(args: argparse.Namespace) -> int:
    staging.link(_config(args, required=True), force=bool(args.force))
    return 0


def update_cmd(args: argparse.Namespace) -> int:
    update_manifest(_config(args, required=True), args.version)
    return 0


def publish_cmd(args: argparse.Namespace) -> int:
    publish(_config(args, required=True), args.version)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="foundry-release",
        description="Build, version and publish a content module",
    )
    p.add_argument("--config", default=None, help=f"Config file (default: {DEFAULT_CONFIG_NAME})")
    p.add_argument("--project-root", default=".", help="Project directory (default: current directory)")
    p.add_argument("--dist-dir", default=None, help="Distribution folder (overrides config distDir)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("build", help="Clean dist/ and copy static files into it").set_defaults(func=build_cmd)
    sub.add_parser("clean", help="Remove built files from dist/").set_defaults(func=clean_cmd)
    sub.add_parser("package", help="Zip dist/ into the release artifact").set_defaults(func=package_cmd)

    w = sub.add_parser("watch", help="Copy static files again whenever they change")
    w.add_argument("--interval", type=float, default=1.0, help="Polling interval in seconds (default: 1.0)")
    w.set_defaults(func=watch_cmd)

    ln = sub.add_parser("link", help="Symlink dist/ into the application data folder")
    ln.add_argument("--force", action="store_true", help="Replace an existing folder at the link location")
    ln.set_defaults(func=link_cmd)

    version_help = "Target version (major.minor.patch) or bump level: major, minor, patch"

    u = sub.add_parser("update", help="Bump the manifest version and rewrite its URLs")
    u.add_argument("version", nargs="?", default=None, help=version_help)
    u.set_defaults(func=update_cmd)

    pub = sub.add_parser("publish", help="Update the manifest, then git commit and tag")
    pub.add_argument("version", nargs="?", default=None, help=version_help)
    pub.set_defaults(func=publish_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return int(args.func(args))
    except ReleaseError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
