"""Fork-to-star ratio metrics for the engagement section of a report."""

import math
from typing import Optional


def fork_to_star_ratio(stars: float, forks: Optional[float]) -> Optional[int]:
    """
    Stars per fork, rounded half up.

    Legitimate projects typically have many stars per fork; a ratio near 1
    is unusual for a popular repository.

    Args:
        stars: Repository stargazer count
        forks: Repository fork count

    Returns:
        Optional[int]: Rounded stars/forks, or None when there are no forks
    """
    if not forks:
        return None
    return math.floor(stars / forks + 0.5)


def format_fork_ratio(stars: float, forks: Optional[float]) -> str:
    ratio = fork_to_star_ratio(stars, forks)
    return "N/A" if ratio is None else f"1:{ratio}"


def fork_percentage(forks: Optional[float], stars: Optional[float]) -> float:
    """Forks as a percentage of stars; 0.0 when either count is missing or stars is 0."""
    forks = forks or 0
    if not stars:
        return 0.0
    return (forks / stars) * 100
