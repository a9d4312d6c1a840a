from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Responded:
    status_code: int


@dataclass(frozen=True)
class TransportError:
    description: str


RawAttemptResult = Responded | TransportError


@dataclass(frozen=True)
class Success:
    status_code: int


@dataclass(frozen=True)
class Failure:
    message: str


CheckOutcome = Success | Failure


@dataclass(frozen=True)
class CheckRecord:
    url: str
    outcome: CheckOutcome
    elapsed_s: float
    timestamp: datetime

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)

    @property
    def status(self) -> str:
        if isinstance(self.outcome, Success):
            return str(self.outcome.status_code)
        return self.outcome.message
