"""Maps suspicion scores to risk bands and their display metadata."""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote_plus

from starbuster.core.constants import (
    BADGE_COLORS,
    BAND_STYLES,
    SHARE_CARD_COLORS,
    SHARE_CARD_HIGH_MIN,
    SHARE_CARD_MEDIUM_MIN,
    THREE_BAND_HIGH_MIN,
    THREE_BAND_MEDIUM_MIN,
)


class RiskBand(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class BandStyle:
    """Presentation attributes for a risk band."""
    band: RiskBand
    label: str
    color: str
    background: str
    icon: str
    emoji: str


def three_band_policy(score: float) -> RiskBand:
    """Results-page banding: <30 LOW, 30-59 MEDIUM, >=60 HIGH."""
    if score < THREE_BAND_MEDIUM_MIN:
        return RiskBand.LOW
    if score < THREE_BAND_HIGH_MIN:
        return RiskBand.MEDIUM
    return RiskBand.HIGH


def share_card_policy(score: float) -> str:
    """Share-card banding: >=70 High Risk, 40-69 Medium Risk, <40 Low Risk."""
    if score >= SHARE_CARD_HIGH_MIN:
        return "High Risk"
    if score >= SHARE_CARD_MEDIUM_MIN:
        return "Medium Risk"
    return "Low Risk"


def band_style(band: RiskBand) -> BandStyle:
    return BandStyle(band=band, **BAND_STYLES[band.value])


def suspicion_level(score: float) -> BandStyle:
    """Three-band classification of a score together with its display style."""
    return band_style(three_band_policy(score))


def share_card_color(score: float) -> str:
    return SHARE_CARD_COLORS[share_card_policy(score)]


def share_card_description(score: float) -> str:
    """One-line description used for share links and card metadata."""
    return f"Suspicion Score: {score}/100 | {share_card_policy(score)}"


def generate_badge_url(score: float) -> str:
    """Generate a shields.io badge URL for a suspicion score."""
    color_str = BADGE_COLORS[share_card_policy(score)]

    label_enc = quote_plus("StarBuster Suspicion")
    message_enc = quote_plus(f"{score}/100")

    return f"https://img.shields.io/badge/{label_enc}-{message_enc}-{color_str}.svg?style=flat-square&logo=github"
