"""
git.py

Responsibility: Commit and tag releases with the `git` command line.

This module must be the only place that:
- Invokes git subprocesses
- Renders commit/tag messages from the configured templates

A failed git command raises GitError with the command's output. Files
written before the failure (the manifest) are left as they are.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from releaser.config import ReleaseConfig
from releaser.errors import ConfigError, GitError
from releaser.manifest import load_manifest, update_manifest

logger = logging.getLogger(__name__)

_env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=False)


def render_message(template: str, **context: object) -> str:
    try:
        return _env.from_string(template).render(**context)
    except TemplateError as e:
        raise ConfigError(f"Invalid message template {template!r}: {e}") from e


class GitRepo:
    def __init__(self, workdir: str | Path, executable: str = "git") -> None:
        self.workdir = Path(workdir)
        self._git = executable

    def _run(self, *args: str) -> str:
        cmd = [self._git, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(self.workdir),
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise GitError(f"git executable not found: {self._git}") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"Command failed: {' '.join(cmd)}\n\n{e.stdout}") from e
        return proc.stdout

    def commit(self, message: str, *, all: bool = True) -> None:
        args = ["commit"]
        if all:
            args.append("-a")
        self._run(*args, "-m", message)

    def tag(self, name: str, message: str) -> None:
        self._run("tag", "-a", name, "-m", message)


def commit_and_tag(config: ReleaseConfig, version: str, repo: GitRepo | None = None) -> str:
    """
    Commit all tracked changes and tag the release. Returns the tag name.
    """
    repo = repo or GitRepo(config.project_root)
    tag_name = render_message(config.tag_name, version=version)

    repo.commit(render_message(config.commit_message, version=version))
    repo.tag(tag_name, render_message(config.tag_message, version=version))
    logger.info("Committed and tagged %s", tag_name)
    return tag_name


def publish(config: ReleaseConfig, request: str | None, repo: GitRepo | None = None) -> str:
    """
    Update the manifest, then commit and tag the new version.

    The tag is taken from the manifest as written, so it always matches what
    was committed.
    """
    update_manifest(config, request)
    version = load_manifest(config.project_root, config.manifest_name).version
    return commit_and_tag(config, version, repo)
