# tests/conftest.py
import datetime

import matplotlib
import pytest

matplotlib.use("Agg")


@pytest.fixture
def fixed_now():
    return datetime.datetime(2024, 6, 1, 0, 0, 0)


@pytest.fixture
def basic_payload():
    return {
        "id": "abc123",
        "repository": {
            "fullName": "octo/widgets",
            "stars": 12500,
            "forks": 500,
            "createdAt": "2023-06-01T00:00:00Z",
            "language": "Python",
            "description": "Widgets for everyone",
            "openIssues": 3,
            "watchers": 12500,
        },
        "analysis": {
            "totalStars": 12500,
            "analyzedSample": 200,
            "patterns": {
                "genericUsernames": 10,
                "botLikeNames": 4,
                "suspiciousCreationDates": {
                    "2024-01-01": 12,
                    "2024-01-02": 6,
                    "2024-01-03": 2,
                },
            },
            "suspicionScore": 65,
            "suspicionIndicators": ["Many accounts created on the same day"],
        },
        "metadata": {
            "analyzedAt": "2024-06-01T10:00:00Z",
            "analysisType": "basic",
            "sampleSize": 200,
            "detailedSample": 0,
            "processingTime": 125000,
        },
    }


@pytest.fixture
def advanced_payload(basic_payload):
    payload = dict(basic_payload)
    payload["analysis"] = {
        "totalStars": 12500,
        "analyzedSample": 200,
        "detailedSample": 100,
        "patterns": {
            "genericUsernames": 10,
            "botLikeNames": 4,
            "suspiciousCreationDates": {"2024-02-10": 4},
            "newAccounts": 30,
            "noRepos": 40,
            "noEmail": 150,
            "noBio": 120,
            "noBlog": 160,
            "lowEngagement": 90,
            "coordinated": 12,
            "sameDayPattern": 8,
            "starVelocitySpikes": [],
            "suspiciousTimeWindows": [{"time": "2024-01-01T10:00:00Z", "count": 25}],
        },
        "realStars": 150,
        "fakeStars": 50,
        "suspicionScore": 25,
        "suspicionIndicators": [],
    }
    payload["metadata"] = dict(basic_payload["metadata"], analysisType="advanced", detailedSample=100)
    return payload
