# Mission Control error types.
# Created: 2026-09-14

from __future__ import annotations


class MissionControlError(Exception):
    """Base class for Mission Control service errors."""


class NotFoundError(MissionControlError):
    """Raised when a record referenced by id does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class DuplicateNameError(MissionControlError):
    """Raised when a uniquely-named record would be duplicated."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} name already exists: {name}")
        self.kind = kind
        self.name = name
