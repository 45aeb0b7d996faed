"""Data model for the quality gate."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class StageStatus(str, Enum):
    """Terminal status of one upstream stage."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"

    @classmethod
    def parse(cls, token: Optional[str]) -> "StageStatus":
        """
        Map a raw status token onto the enumeration.

        Anything that is not one of the four known values degrades to FAILURE.
        """
        norm = (token or "").strip().lower()
        for member in cls:
            if member.value == norm:
                return member
        return cls.FAILURE


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


@dataclass(frozen=True)
class StageResult:
    """
    Terminal outcome of one upstream stage.

    required=None leaves the decision to the gate configuration; an explicit
    True/False always wins over it.
    """
    name: str
    status: StageStatus
    required: Optional[bool] = None
    reported: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.status, StageStatus):
            raw = self.status if isinstance(self.status, str) else ""
            object.__setattr__(self, "status", StageStatus.parse(raw))
            if not self.reported:
                object.__setattr__(self, "reported", raw.strip() or "<empty>")
        if not self.reported:
            object.__setattr__(self, "reported", self.status.value)

    @classmethod
    def from_token(cls, name: str, token: Optional[str], required: Optional[bool] = None) -> "StageResult":
        raw = (token or "").strip()
        return cls(name=name, status=StageStatus.parse(raw), required=required, reported=raw or "<empty>")


@dataclass(frozen=True)
class SummaryLine:
    name: str
    status: StageStatus
    required: bool
    blocked: bool = False
    warned: bool = False
    reported: str = ""
    missing: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "status": self.status.value,
            "required": self.required,
            "blocked": self.blocked,
            "warned": self.warned,
            "reported": self.reported,
            "missing": self.missing,
        }


@dataclass(frozen=True)
class GateVerdict:
    """Aggregate result of one gate evaluation."""
    overall: Verdict
    summary: Tuple[SummaryLine, ...] = ()
    blocking: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def blocking_ordered(self) -> Tuple[str, ...]:
        """Blocking stage names in summary order."""
        seen = []
        for line in self.summary:
            if line.blocked and line.name not in seen:
                seen.append(line.name)
        return tuple(seen)

    @property
    def warned(self) -> Tuple[str, ...]:
        return tuple(line.name for line in self.summary if line.warned)

    def to_dict(self) -> Dict[str, object]:
        return {
            "overall": self.overall.value,
            "blocking": list(self.blocking_ordered),
            "warned": list(self.warned),
            "stages": [line.to_dict() for line in self.summary],
        }
