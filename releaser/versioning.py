"""
versioning.py

Responsibility: Resolve the next manifest version and derive the URL fields.

A request is either a literal `major.minor.patch` string, taken verbatim,
or one of the bump levels `major`, `minor`, `patch`. Lower-order components
reset to zero on a bump. Resolving to the current version is refused, since
the commit and tag that follow would change nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from releaser.errors import (
    InvalidVersionArgumentError,
    MissingConfigurationError,
    MissingVersionError,
    NoOpVersionError,
)

VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)", re.ASCII)
BUMP_LEVELS = ("major", "minor", "patch")


def is_version(text: str) -> bool:
    return VERSION_PATTERN.fullmatch(text) is not None


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "Version":
        m = VERSION_PATTERN.fullmatch(text)
        if m is None:
            raise InvalidVersionArgumentError(f"Not a major.minor.patch version: {text!r}")
        return cls(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    def bump(self, level: str) -> "Version":
        if level == "major":
            return Version(self.major + 1, 0, 0)
        if level == "minor":
            return Version(self.major, self.minor + 1, 0)
        if level == "patch":
            return Version(self.major, self.minor, self.patch + 1)
        raise InvalidVersionArgumentError(
            f"Unknown bump level {level!r} (expected one of: {', '.join(BUMP_LEVELS)})"
        )

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def resolve_version(request: str | None, current_version: str) -> str:
    """
    Compute the target version for `request` against `current_version`.

    Raises on the first problem found:
    - MissingVersionError: no request given
    - InvalidVersionArgumentError: neither a literal version nor a bump level
    - NoOpVersionError: the target equals the current version
    """
    request = (request or "").strip()
    if not request:
        raise MissingVersionError("Missing version number")

    if is_version(request):
        target = request
    elif request in BUMP_LEVELS:
        target = str(Version.parse(current_version).bump(request))
    else:
        raise InvalidVersionArgumentError(
            f"Incorrect version argument {request!r}: "
            f"expected major.minor.patch or one of {', '.join(BUMP_LEVELS)}"
        )

    if target == current_version:
        raise NoOpVersionError(f"Target version is identical to current version ({current_version})")
    return target


def release_urls(
    repository_url: str,
    version: str,
    *,
    manifest_name: str = "module.json",
    artifact_name: str = "module.zip",
) -> dict[str, str]:
    return {
        "url": repository_url,
        "manifest": f"{repository_url}/releases/latest/download/{manifest_name}",
        "download": f"{repository_url}/releases/download/v{version}/{artifact_name}",
    }


def apply_version(
    manifest: Mapping[str, Any],
    target_version: str,
    repository_url: str | None,
    *,
    manifest_name: str = "module.json",
    artifact_name: str = "module.zip",
) -> dict[str, Any]:
    """
    Return a copy of `manifest` carrying `target_version` and the derived URLs.

    Other keys keep their values and order; the input is not modified.
    """
    if not repository_url:
        raise MissingConfigurationError("Repository URL is not configured")

    updated = dict(manifest)
    updated["version"] = target_version
    updated.update(
        release_urls(
            repository_url,
            target_version,
            manifest_name=manifest_name,
            artifact_name=artifact_name,
        )
    )
    return updated
