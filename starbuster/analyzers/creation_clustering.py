"""Detects clustered account creation dates among stargazers."""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Mapping, Sequence, Tuple

import pandas as pd

from starbuster.core.constants import (
    CLUSTERING_FALLBACK_SUMMARY,
    HIGH_SEVERITY_THRESHOLD,
    MEDIUM_SEVERITY_THRESHOLD,
    SUSPICIOUS_DAY_THRESHOLD,
)

logger = logging.getLogger(__name__)


class Severity(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class SuspiciousDay:
    """A creation date with more accounts than the suspicious threshold."""
    date: str
    count: int
    severity: Severity


@dataclass(frozen=True)
class ClusteringStatistics:
    max_accounts_in_one_day: int = 0
    days_with_more_than_5_accounts: int = 0
    days_with_more_than_10_accounts: int = 0
    total_suspicious_days: int = 0


@dataclass(frozen=True)
class ClusteringReport:
    """Aggregated view of a creation-date histogram."""
    statistics: ClusteringStatistics = field(default_factory=ClusteringStatistics)
    suspicious_days: Tuple[SuspiciousDay, ...] = ()
    has_suspicious_pattern: bool = False
    summary: str = ""

    def to_dict(self) -> Dict:
        return {
            "statistics": asdict(self.statistics),
            "suspicious_days": [
                {"date": day.date, "count": day.count, "severity": day.severity.value}
                for day in self.suspicious_days
            ],
            "has_suspicious_pattern": self.has_suspicious_pattern,
            "summary": self.summary,
        }


def severity_for_count(count: int) -> Severity:
    """Severity tier for a single day's account count."""
    if count > HIGH_SEVERITY_THRESHOLD:
        return Severity.HIGH
    if count > MEDIUM_SEVERITY_THRESHOLD:
        return Severity.MEDIUM
    # Days with 4 or 5 accounts are still listed as suspicious, just as Low
    return Severity.LOW


def _build_summary(
    statistics: ClusteringStatistics, suspicious_days: Sequence[SuspiciousDay]
) -> str:
    parts = []
    max_count = statistics.max_accounts_in_one_day

    if max_count > HIGH_SEVERITY_THRESHOLD:
        parts.append(f"Critical: {max_count} accounts created in a single day")
    elif max_count > MEDIUM_SEVERITY_THRESHOLD:
        parts.append(f"Warning: {max_count} accounts created in a single day")

    if statistics.days_with_more_than_5_accounts > 1:
        parts.append(
            f"{statistics.days_with_more_than_5_accounts} days had more than 5 accounts created"
        )

    if suspicious_days:
        top_day = suspicious_days[0]
        parts.append(f"Most active day: {top_day.date} with {top_day.count} accounts")

    return ". ".join(parts)


def analyze_creation_dates(histogram: Mapping[str, int]) -> ClusteringReport:
    """
    Build a clustering report from an account-creation-date histogram.

    Args:
        histogram: Mapping of ISO date (YYYY-MM-DD) to the number of
            stargazer accounts created that day. May be empty.

    Returns:
        ClusteringReport: statistics, suspicious days sorted by count
        (descending, ties keep input order), the suspicious-pattern flag
        and a summary sentence ("" when nothing stands out).
    """
    counts = pd.Series(dict(histogram), dtype="int64")
    if counts.empty:
        logger.debug("Empty creation-date histogram, nothing to cluster")
        return ClusteringReport()

    ordered = counts.sort_values(ascending=False, kind="stable")
    flagged = ordered[ordered > SUSPICIOUS_DAY_THRESHOLD]

    suspicious_days = tuple(
        SuspiciousDay(date=str(date), count=int(count), severity=severity_for_count(int(count)))
        for date, count in flagged.items()
    )

    statistics = ClusteringStatistics(
        max_accounts_in_one_day=int(counts.max()),
        days_with_more_than_5_accounts=int((counts > MEDIUM_SEVERITY_THRESHOLD).sum()),
        days_with_more_than_10_accounts=int((counts > HIGH_SEVERITY_THRESHOLD).sum()),
        total_suspicious_days=len(suspicious_days),
    )

    report = ClusteringReport(
        statistics=statistics,
        suspicious_days=suspicious_days,
        has_suspicious_pattern=statistics.max_accounts_in_one_day > MEDIUM_SEVERITY_THRESHOLD,
        summary=_build_summary(statistics, suspicious_days),
    )
    logger.debug(
        f"Clustered {len(counts)} creation dates: max={statistics.max_accounts_in_one_day}, "
        f"suspicious_days={statistics.total_suspicious_days}"
    )
    return report


def summary_or_default(report: ClusteringReport) -> str:
    """Report summary, or the explanatory fallback sentence when it is empty."""
    return report.summary or CLUSTERING_FALLBACK_SUMMARY


def suspicious_creations_count(histogram: Mapping[str, int]) -> int:
    """Total number of accounts across all dates in the histogram."""
    return int(sum(histogram.values()))
