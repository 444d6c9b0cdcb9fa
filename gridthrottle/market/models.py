"""Market data models - typed representations of OTE public service objects."""

from dataclasses import dataclass, field
from datetime import date
from typing import Generic, Literal, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PriceRecord:
    """One hourly quotation (day-ahead or intraday)."""

    date: date
    hour: int
    price: float
    volume: Optional[float] = None


@dataclass(frozen=True)
class DayAheadIndexRecord:
    """Daily aggregate index of the day-ahead market."""

    date: date
    base_load: float
    peak_load: float
    off_peak_load: float
    eur_rate: Optional[float] = None
    emergency: Optional[int] = None


@dataclass(frozen=True)
class FetchError:
    """Why a fetch produced no data."""

    kind: Literal["request", "transport", "status", "decode"]
    message: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Either the decoded records of one call or the reason it failed."""

    records: list[T] = field(default_factory=list)
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, kind, message: str, status_code: Optional[int] = None) -> "FetchResult[T]":
        return cls(error=FetchError(kind=kind, message=message, status_code=status_code))
