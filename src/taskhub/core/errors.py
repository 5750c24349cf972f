# src/taskhub/core/errors.py

"""
Exception hierarchy.

- ValidationError: raised by entity models on invalid construction/mutation input.
- DuplicateError: raised by repositories when a uniqueness invariant would break.

Not-found is never an exception: lookups return None / [] and update/delete
return None / False.
"""

from __future__ import annotations

from collections.abc import Iterable


class TaskHubError(Exception):
    """Base class for every error raised by taskhub itself."""


class ValidationError(TaskHubError, ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    @classmethod
    def invalid_choice(cls, field: str, value: object, valid: Iterable[str]) -> ValidationError:
        choices = ", ".join(valid)
        return cls(field, f"Invalid {field}: {value!r}. Must be one of: {choices}")


class DuplicateError(ValidationError):
    pass
