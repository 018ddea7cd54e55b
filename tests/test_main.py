# tests/test_main.py
import json

import pytest

from starbuster.core.constants import CLUSTERING_FALLBACK_SUMMARY
from starbuster.main import StarBuster


@pytest.fixture
def engine():
    return StarBuster("https://starbuster.test/")


def test_basic_view(engine, basic_payload, fixed_now):
    view = engine.build_view(basic_payload, now=fixed_now)

    repo = view["repository"]
    assert repo["full_name"] == "octo/widgets"
    assert repo["stars_display"] == "12.5K"
    assert repo["forks_display"] == "500"
    assert repo["days_old"] == 366
    assert repo["stars_per_day"] == pytest.approx(12500 / 366)
    assert repo["fork_ratio"] == "1:25"
    assert repo["fork_percentage"] == "4.0%"

    suspicion = view["suspicion"]
    assert suspicion["score"] == 65
    assert suspicion["level"] == "HIGH"
    assert suspicion["share_card_level"] == "Medium Risk"
    assert suspicion["description"] == "Suspicion Score: 65/100 | Medium Risk"

    assert view["analysis_type"] == "basic"
    assert view["share_url"] == "https://starbuster.test/results/abc123"
    assert [row["name"] for row in view["patterns"]] == [
        "Generic Usernames",
        "Bot-like Names",
        "Suspicious Creation Dates",
    ]
    assert view["patterns"][0]["percentage"] == "5.0%"
    assert view["patterns"][2]["count"] == 20
    assert view["stars_breakdown"] is None
    assert view["time_windows"] == []
    assert view["metadata"]["processing_time"] == "2m 5s"

    clustering = view["creation_clustering"]
    assert clustering["has_suspicious_pattern"] is True
    assert clustering["statistics"]["total_suspicious_days"] == 2
    assert clustering["summary"].startswith("Critical: 12 accounts created in a single day")


def test_advanced_view(engine, advanced_payload, fixed_now):
    view = engine.build_view(advanced_payload, now=fixed_now)

    assert view["analysis_type"] == "advanced"
    assert view["suspicion"]["level"] == "LOW"
    assert view["suspicion"]["share_card_level"] == "Low Risk"
    assert len(view["patterns"]) == 11
    assert {"name": "No Blog", "count": 160, "percentage": "80.0%"} in view["patterns"]
    assert view["stars_breakdown"] == {"real": 150, "fake": 50}
    assert view["time_windows"] == [{"time": "2024-01-01T10:00:00Z", "count": 25}]
    assert view["sample"]["detailed_sample"] == 100

    clustering = view["creation_clustering"]
    assert clustering["has_suspicious_pattern"] is False
    assert clustering["summary"] == "Most active day: 2024-02-10 with 4 accounts"


def test_view_from_stored_github_row(engine, fixed_now):
    payload = {
        "repository": {
            "full_name": "octo/tools",
            "stargazers_count": 0,
            "forks_count": 0,
            "created_at": "2024-05-31T00:00:00Z",
        },
        "analysis": {"suspicionScore": 10, "analyzedSample": 0, "patterns": {}},
    }

    view = engine.build_view(payload, now=fixed_now)

    assert view["repository"]["full_name"] == "octo/tools"
    assert view["repository"]["days_old"] == 1
    assert view["repository"]["fork_ratio"] == "N/A"
    assert view["repository"]["fork_percentage"] == "0.0%"
    assert view["share_url"] is None
    assert view["patterns"][0]["percentage"] == "0.0%"
    assert view["creation_clustering"]["summary"] == CLUSTERING_FALLBACK_SUMMARY


def test_text_report(engine, basic_payload, fixed_now):
    report = engine.generate_report(engine.build_view(basic_payload, now=fixed_now), "text")

    assert report.startswith("StarBuster Analysis: octo/widgets")
    assert "SUSPICION SCORE: 65/100 (HIGH RISK" in report
    assert "Generic Usernames: 10 (5.0%)" in report
    assert "2024-01-01: 12 accounts (High)" in report
    assert "Fork-to-Star Ratio: 1:25 (4.0%)" in report
    assert "Share: https://starbuster.test/results/abc123" in report


def test_markdown_report(engine, advanced_payload, fixed_now):
    report = engine.generate_report(engine.build_view(advanced_payload, now=fixed_now), "markdown")

    assert report.startswith("# StarBuster Analysis: octo/widgets")
    assert "| No Email | 150 | 75.0% |" in report
    assert "## Suspicious Time Windows" in report
    assert "_Analysis of 200 star accounts (100 detailed)_" in report


def test_json_report(engine, basic_payload, fixed_now):
    view = engine.build_view(basic_payload, now=fixed_now)
    data = json.loads(engine.generate_report(view, "json"))

    assert data["suspicion"]["level"] == "HIGH"
    assert data["creation_clustering"]["suspicious_days"][1] == {
        "date": "2024-01-02",
        "count": 6,
        "severity": "Medium",
    }


def test_plot_creation_histogram(engine, tmp_path):
    plot_path = tmp_path / "creation.png"

    assert engine.plot_creation_histogram(
        {"2024-01-01": 12, "2024-01-02": 6, "2024-01-05": 2}, save_path=str(plot_path)
    )
    assert plot_path.exists()
    assert engine.plot_creation_histogram({}, save_path=str(plot_path)) is False


def test_plot_skips_keys_that_are_not_dates(engine, tmp_path):
    plot_path = tmp_path / "mixed.png"

    assert engine.plot_creation_histogram(
        {"not-a-date": 7, "2024-01-01": 5}, save_path=str(plot_path)
    )
    assert plot_path.exists()
    assert engine.plot_creation_histogram({"garbage": 3}, save_path=str(tmp_path / "none.png")) is False
    assert not (tmp_path / "none.png").exists()
