"""
errors.py

Responsibility: The single exception hierarchy for foundry-release.

Every error is fatal for the current command: the CLI logs it and exits
non-zero. Nothing is retried and nothing already written is rolled back.
"""

from __future__ import annotations


class ReleaseError(RuntimeError):
    pass


class ConfigError(ReleaseError):
    pass


class MissingConfigurationError(ConfigError):
    pass


class MissingManifestError(ReleaseError):
    pass


class ManifestFormatError(ReleaseError):
    pass


class ManifestWriteError(ReleaseError):
    pass


class MissingVersionError(ReleaseError):
    pass


class InvalidVersionArgumentError(ReleaseError, ValueError):
    pass


class NoOpVersionError(ReleaseError):
    pass


class StagingError(ReleaseError):
    pass


class GitError(ReleaseError):
    pass
