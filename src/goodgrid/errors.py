"""Progression engine error hierarchy.

Store failures (SQLAlchemy, Redis) are not wrapped; they propagate to the
caller as raised by the driver.
"""

from __future__ import annotations


class ProgressionError(Exception):
    """Base class for engine errors."""


class NotFoundError(ProgressionError):
    """A requested record does not exist."""


class StatsNotFoundError(NotFoundError):
    """No stats snapshot exists for the user."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User stats not found: {user_id}")


class VersionConflictError(ProgressionError):
    """The stats snapshot changed since it was read."""

    def __init__(self, user_id: str, expected_version: int, actual_version: int | None = None) -> None:
        self.user_id = user_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Stale stats for {user_id}: expected version {expected_version}, found {actual_version}"
        )
