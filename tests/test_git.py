import json
import shutil
import subprocess
from pathlib import Path

import pytest

from releaser import git
from releaser.config import load_config, with_overrides
from releaser.errors import ConfigError, GitError, NoOpVersionError


class RecordingRepo:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def commit(self, message: str, *, all: bool = True) -> None:
        self.calls.append(("commit", message, all))

    def tag(self, name: str, message: str) -> None:
        self.calls.append(("tag", name, message))


def test_render_message():
    assert git.render_message("version bump v{{ version }}", version="1.2.3") == "version bump v1.2.3"


def test_render_message_rejects_unknown_variables():
    with pytest.raises(ConfigError):
        git.render_message("{{ nope }}", version="1.2.3")


def test_publish_commits_then_tags(project: Path):
    repo = RecordingRepo()
    tag = git.publish(load_config(project_root=project), "major", repo=repo)

    assert tag == "v2.0.0"
    assert repo.calls == [
        ("commit", "version bump v2.0.0", True),
        ("tag", "v2.0.0", "Updated to 2.0.0"),
    ]
    assert json.loads((project / "module.json").read_text(encoding="utf-8"))["version"] == "2.0.0"


def test_publish_uses_configured_templates(project: Path):
    config = with_overrides(load_config(project_root=project), tag_name="release-{{ version }}")
    repo = RecordingRepo()
    assert git.publish(config, "1.5.0", repo=repo) == "release-1.5.0"


def test_publish_noop_never_reaches_git(project: Path):
    repo = RecordingRepo()
    with pytest.raises(NoOpVersionError):
        git.publish(load_config(project_root=project), "1.4.9", repo=repo)
    assert repo.calls == []


def test_git_repo_runs_expected_commands(monkeypatch, tmp_path: Path):
    seen = []

    def fake_run(cmd, **kwargs):
        seen.append((cmd, kwargs["cwd"]))
        return subprocess.CompletedProcess(cmd, 0, stdout="")

    monkeypatch.setattr(git.subprocess, "run", fake_run)
    repo = git.GitRepo(tmp_path)
    repo.commit("version bump v1.0.1")
    repo.tag("v1.0.1", "Updated to 1.0.1")

    assert seen == [
        (["git", "commit", "-a", "-m", "version bump v1.0.1"], str(tmp_path)),
        (["git", "tag", "-a", "v1.0.1", "-m", "Updated to 1.0.1"], str(tmp_path)),
    ]


def test_git_failure_raises_git_error(monkeypatch, tmp_path: Path):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(128, cmd, output="fatal: not a git repository")

    monkeypatch.setattr(git.subprocess, "run", fake_run)
    with pytest.raises(GitError, match="not a git repository"):
        git.GitRepo(tmp_path).tag("v1.0.0", "x")


def test_missing_git_executable(tmp_path: Path):
    with pytest.raises(GitError):
        git.GitRepo(tmp_path, executable="definitely-not-git-xyz").commit("x")


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_publish_against_real_repository(project: Path, monkeypatch):
    for var in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{var}_NAME", "release-bot")
        monkeypatch.setenv(f"{var}_EMAIL", "release-bot@example.invalid")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", "/dev/null")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    def run(*args: str) -> str:
        return subprocess.run(
            ["git", *args], cwd=project, check=True, stdout=subprocess.PIPE, text=True
        ).stdout

    run("init", "-q")
    run("add", "-A")
    run("commit", "-q", "-m", "initial")

    assert git.publish(load_config(project_root=project), "patch") == "v1.4.10"

    assert run("tag", "--list").split() == ["v1.4.10"]
    assert run("log", "-1", "--format=%s").strip() == "version bump v1.4.10"
    assert run("status", "--porcelain").strip() == ""
