"""Result type returned by the session manager's internal steps."""
import enum
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(enum.Enum):
    CREDENTIALS = "credentials"
    TRANSPORT = "transport"
    PARSE = "parse"
    LOOKUP_MISS = "lookup_miss"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either a value or a tagged error. Callers decide whether to log,
    ignore or escalate; nothing here raises.
    """
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""
    exception: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: Any) -> "Result":
        return cls(value=value)

    @classmethod
    def fail(cls, error: ErrorKind, detail: str = "", exception: Optional[BaseException] = None) -> "Result":
        return cls(error=error, detail=detail, exception=exception)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        return self.value if self.is_ok else default


@dataclass(frozen=True)
class CaseResult:
    """Payload posted to add_result for a single test."""
    status_id: int
    comment: str

    def to_payload(self) -> dict:
        return {"status_id": self.status_id, "comment": self.comment}
