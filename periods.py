from dataclasses import dataclass
from datetime import date
from typing import Optional

from exceptions import ReportQueryError


@dataclass(frozen=True)
class DateRange:
    start: Optional[date]
    end: Optional[date]

    def cache_key(self) -> str:
        start = self.start.isoformat() if self.start else ""
        end = self.end.isoformat() if self.end else ""
        return f"{start}_{end}"


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ReportQueryError(f"{name} must be an ISO date (YYYY-MM-DD)") from exc


def resolve_range(
    from_date: Optional[str], to_date: Optional[str]
) -> Optional[DateRange]:
    start = _parse_date(from_date, "fromDate")
    end = _parse_date(to_date, "toDate")
    if start is None and end is None:
        return None
    if start and end and start > end:
        raise ReportQueryError("fromDate must be on or before toDate")
    return DateRange(start, end)
