"""Tagged result passed between validation stages.

Each stage of the pipeline returns an ``Outcome`` rather than raising:

- ``Outcome.proceed(value)``: the stage passed; ``value`` feeds the next one.
- ``Outcome.reject(message)``: the token is invalid; the pipeline stops and
  reports ``message`` in the ValidationResult.
- ``Outcome.fail(error)``: an operational failure; the pipeline stops and
  raises ``error``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .errors import OperationalError

T = TypeVar("T")


class OutcomeKind(Enum):
    PROCEED = "proceed"
    REJECT = "reject"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    kind: OutcomeKind
    value: T | None = None
    message: str | None = None
    error: OperationalError | None = None

    @classmethod
    def proceed(cls, value: T) -> Outcome[T]:
        return cls(OutcomeKind.PROCEED, value=value)

    @classmethod
    def reject(cls, message: str) -> Outcome[T]:
        return cls(OutcomeKind.REJECT, message=message)

    @classmethod
    def fail(cls, error: OperationalError) -> Outcome[T]:
        return cls(OutcomeKind.FAIL, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.PROCEED

    def raise_for_failure(self) -> None:
        """Raise the carried error if this outcome is a failure."""
        if self.kind is OutcomeKind.FAIL and self.error is not None:
            raise self.error
