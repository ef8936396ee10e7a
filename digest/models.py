"""
Data model for the daily digest.
Records produced by the providers and the immutable TodayDigest built from them.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class Era(Enum):
    """Side of the reference epoch a year falls on."""
    BCE = "bce"
    CE = "ce"


BCE_PREFIX = "紀元前"
YEAR_SUFFIX = "年"

EVENT = "event"
BIRTH = "birth"
DEATH = "death"


@dataclass(frozen=True)
class DateKey:
    """A calendar day without a year."""
    month: int
    day: int

    @classmethod
    def from_date(cls, value: date) -> "DateKey":
        return cls(month=value.month, day=value.day)

    @property
    def numeric(self) -> str:
        """Zero-padded "MM-DD" form used by php.co.jp."""
        return f"{self.month:02d}-{self.day:02d}"

    @property
    def compact(self) -> str:
        """Zero-padded "MMDD" form used by the birth flower API."""
        return f"{self.month:02d}{self.day:02d}"

    @property
    def display(self) -> str:
        """Japanese "M月D日" form, also the Wikipedia page title."""
        return f"{self.month}月{self.day}日"


@dataclass(frozen=True)
class YearValue:
    """A year tagged with its era."""
    era: Era
    magnitude: int

    @classmethod
    def parse(cls, digits: str, bce: bool = False) -> "YearValue":
        return cls(era=Era.BCE if bce else Era.CE, magnitude=int(digits))

    @property
    def signed(self) -> int:
        return -self.magnitude if self.era is Era.BCE else self.magnitude

    @property
    def token(self) -> str:
        prefix = BCE_PREFIX if self.era is Era.BCE else ""
        return f"{prefix}{self.magnitude}{YEAR_SUFFIX}"


@dataclass(frozen=True)
class DatedRecord:
    """An event, birth or death extracted from Wikipedia."""
    year: YearValue
    label: str
    role: Optional[str] = None
    category: str = EVENT

    @property
    def display(self) -> str:
        """Line shown in the message."""
        if self.category == EVENT:
            return self.label
        return f"{self.year.token}: {self.label}"

    def __str__(self) -> str:
        return self.display


@dataclass(frozen=True)
class AnniversaryRecord:
    """An anniversary or festival from php.co.jp."""
    label: str

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class FlowerFact:
    """Birth flower of the day."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TodayDigest:
    """Everything collected for one day, ready for the formatter."""
    date: str
    anniversaries: Tuple[AnniversaryRecord, ...] = field(default_factory=tuple)
    historical_events: Tuple[DatedRecord, ...] = field(default_factory=tuple)
    notable_births: Tuple[DatedRecord, ...] = field(default_factory=tuple)
    notable_deaths: Tuple[DatedRecord, ...] = field(default_factory=tuple)
    flower: Optional[FlowerFact] = None
