# tests/test_risk_bands.py
import pytest

from starbuster.core.risk_bands import (
    RiskBand,
    band_style,
    generate_badge_url,
    share_card_color,
    share_card_description,
    share_card_policy,
    suspicion_level,
    three_band_policy,
)


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, RiskBand.LOW),
        (29, RiskBand.LOW),
        (30, RiskBand.MEDIUM),
        (59, RiskBand.MEDIUM),
        (60, RiskBand.HIGH),
        (100, RiskBand.HIGH),
    ],
)
def test_three_band_boundaries(score, expected):
    assert three_band_policy(score) is expected


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, "Low Risk"),
        (39, "Low Risk"),
        (40, "Medium Risk"),
        (69, "Medium Risk"),
        (70, "High Risk"),
        (100, "High Risk"),
    ],
)
def test_share_card_boundaries(score, expected):
    assert share_card_policy(score) == expected


def test_policies_disagree_between_60_and_69():
    assert three_band_policy(65) is RiskBand.HIGH
    assert share_card_policy(65) == "Medium Risk"


def test_band_styles():
    low = band_style(RiskBand.LOW)
    high = suspicion_level(85)

    assert low.color == "text-green-700"
    assert low.background == "bg-green-50"
    assert low.emoji == "✅"
    assert high.band is RiskBand.HIGH
    assert high.label == "HIGH"
    assert high.icon == "alert-circle"
    assert suspicion_level(45).emoji == "⚠️"


def test_share_card_color_and_description():
    assert share_card_color(75) == "#dc2626"
    assert share_card_color(50) == "#d97706"
    assert share_card_color(10) == "#059669"
    assert share_card_description(75) == "Suspicion Score: 75/100 | High Risk"


def test_badge_url():
    url = generate_badge_url(75)

    assert url.startswith("https://img.shields.io/badge/StarBuster+Suspicion-75%2F100-red.svg")
    assert generate_badge_url(10).split("?")[0].endswith("-success.svg")
