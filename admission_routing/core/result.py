from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RoutingResult(Generic[T]):
    """Outcome of one routing stage: either a value or a reason.

    Stages never raise to the orchestrator; they return ``err(...)`` so
    the miss reason can be logged and asserted on, while the public
    ``find_best_agent`` contract still collapses every error to ``None``.
    """

    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "RoutingResult[T]":
        return cls(value=value)

    @classmethod
    def err(cls, reason: str) -> "RoutingResult[T]":
        return cls(error=reason)

    @property
    def is_ok(self) -> bool:
        return self.error is None
