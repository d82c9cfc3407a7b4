from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SUCCESS = 'success'
NOT_FOUND = 'not_found'
NO_CHANGE = 'no_change'


@dataclass
class Outcome:
    """Result of a service call that may legitimately do nothing.

    ``not_found`` and ``no_change`` are expected answers rather than errors,
    so they are returned instead of raised; views map them to 404 / 409.
    ``notifications`` holds the materialized notifications the call created.
    """
    status: str
    value: Any = None
    notifications: list[dict] = field(default_factory=list)
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @property
    def not_found(self) -> bool:
        return self.status == NOT_FOUND

    @property
    def no_change(self) -> bool:
        return self.status == NO_CHANGE

    @classmethod
    def success(cls, value: Any = None, notifications: Optional[list[dict]] = None) -> 'Outcome':
        return cls(SUCCESS, value, list(notifications or []))

    @classmethod
    def missing(cls, detail: str = 'not found') -> 'Outcome':
        return cls(NOT_FOUND, detail=detail)

    @classmethod
    def unchanged(cls, value: Any = None, detail: Optional[str] = None,
                  notifications: Optional[list[dict]] = None) -> 'Outcome':
        return cls(NO_CHANGE, value, list(notifications or []), detail)
