"""
Labour Trend Enums

Standardized constants for the labour cost trend payload.
"""

from enum import IntEnum, Enum


class RangeDays(IntEnum):
    """Supported lookback windows (days)"""
    LAST_30 = 30
    LAST_90 = 90
    LAST_180 = 180
    LAST_365 = 365

    @classmethod
    def allowed(cls) -> list:
        return [member.value for member in cls]

    @classmethod
    def to_label(cls, days: int) -> str:
        labels = {
            30: "Last 30 days",
            90: "Last 90 days",
            180: "Last 6 months",
            365: "Last 12 months"
        }
        return labels.get(days, f"Last {days} days")


class Granularity(str, Enum):
    """Trend bucket size"""
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def for_range(cls, range_days: int) -> "Granularity":
        """Weekly buckets up to 90 days, monthly beyond"""
        return cls.WEEK if range_days <= 90 else cls.MONTH


class AnomalySeverity(str, Enum):
    """Anomaly severity"""
    INFO = "info"
    WARN = "warn"


class AnomalyMetric(str, Enum):
    """Metric an anomaly was raised on"""
    AVG_LABOUR_COST_PER_JOB = "avgLabourCostPerJob"
    OVERTIME_PCT = "overtimePct"


class TimeEntryCategory(str, Enum):
    """Time entry categories (informational only)"""
    BILLABLE = "billable"
    TRAVEL = "travel"
    ADMIN = "admin"
    IDLE = "idle"

    @classmethod
    def from_value(cls, value) -> "TimeEntryCategory":
        """Parse category, defaulting to billable"""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.BILLABLE


CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
}


def currency_symbol(currency: str) -> str:
    """Symbol for a currency code, or the code followed by a space"""
    code = (currency or "").upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")
