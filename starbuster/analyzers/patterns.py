"""Stargazer pattern counts reported by the analysis service."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class PatternKind(Enum):
    BASIC = "basic"
    ADVANCED = "advanced"


@dataclass
class SuspiciousTimeWindow:
    """A time bucket with an unusual number of stars."""
    time: str
    count: int


@dataclass
class BasicPatterns:
    generic_usernames: int = 0
    bot_like_names: int = 0
    suspicious_creation_dates: Dict[str, int] = field(default_factory=dict)
    kind: PatternKind = field(default=PatternKind.BASIC, init=False)


@dataclass
class AdvancedPatterns(BasicPatterns):
    new_accounts: int = 0
    no_repos: int = 0
    no_email: int = 0
    no_bio: int = 0
    no_blog: int = 0
    low_engagement: int = 0
    coordinated: int = 0
    same_day_pattern: int = 0
    star_velocity_spikes: List[Any] = field(default_factory=list)
    real_stars: int = 0
    fake_stars: int = 0
    suspicious_time_windows: List[SuspiciousTimeWindow] = field(default_factory=list)

    def __post_init__(self):
        self.kind = PatternKind.ADVANCED


PatternSet = Union[BasicPatterns, AdvancedPatterns]

# (payload key, dataclass field) for the count fields only advanced payloads carry
_ADVANCED_COUNT_FIELDS = [
    ("newAccounts", "new_accounts"),
    ("noRepos", "no_repos"),
    ("noEmail", "no_email"),
    ("noBio", "no_bio"),
    ("noBlog", "no_blog"),
    ("lowEngagement", "low_engagement"),
    ("coordinated", "coordinated"),
    ("sameDayPattern", "same_day_pattern"),
    ("realStars", "real_stars"),
    ("fakeStars", "fake_stars"),
]


def is_advanced_patterns(patterns: Union[PatternSet, Mapping, None]) -> bool:
    """
    Tell whether a pattern set is the advanced variant.

    Typed pattern sets answer through their ``kind``. Raw payloads from the
    service carry no tag, so a mapping is advanced iff it has a
    ``newAccounts`` key, even one set to null, whatever else it contains.
    """
    if not patterns:
        return False
    if isinstance(patterns, BasicPatterns):
        return patterns.kind is PatternKind.ADVANCED
    if isinstance(patterns, Mapping):
        return "newAccounts" in patterns
    return hasattr(patterns, "newAccounts")


def _parse_time_windows(raw_windows: Optional[List]) -> List[SuspiciousTimeWindow]:
    windows = []
    for window in raw_windows or []:
        if isinstance(window, Mapping):
            windows.append(
                SuspiciousTimeWindow(time=str(window.get("time", "")), count=int(window.get("count", 0) or 0))
            )
        else:
            logger.debug(f"Skipping malformed suspicious time window: {window!r}")
    return windows


def parse_patterns(
    payload: Optional[Mapping], extras: Optional[Mapping] = None
) -> PatternSet:
    """
    Build a typed pattern set from a camelCase service payload.

    Args:
        payload: The ``analysis.patterns`` object.
        extras: The enclosing ``analysis`` object. Some service versions
            report ``realStars``/``fakeStars``/``suspiciousTimeWindows`` there
            instead of inside ``patterns``.
    """
    payload = payload or {}
    extras = extras or {}

    basic_kwargs = {
        "generic_usernames": int(payload.get("genericUsernames", 0) or 0),
        "bot_like_names": int(payload.get("botLikeNames", 0) or 0),
        "suspicious_creation_dates": {
            str(date): int(count or 0)
            for date, count in (payload.get("suspiciousCreationDates") or {}).items()
        },
    }

    if not is_advanced_patterns(payload):
        return BasicPatterns(**basic_kwargs)

    def _pick(key):
        value = payload.get(key)
        return extras.get(key) if value is None else value

    advanced_kwargs = {
        attr: int(_pick(key) or 0) for key, attr in _ADVANCED_COUNT_FIELDS
    }
    return AdvancedPatterns(
        **basic_kwargs,
        **advanced_kwargs,
        star_velocity_spikes=list(_pick("starVelocitySpikes") or []),
        suspicious_time_windows=_parse_time_windows(_pick("suspiciousTimeWindows")),
    )


def pattern_percentage(count: float, analyzed_sample: float) -> float:
    """Share of the analyzed sample matching a pattern, in percent."""
    if not analyzed_sample or analyzed_sample <= 0:
        return 0.0
    return (count / analyzed_sample) * 100
