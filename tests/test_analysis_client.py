# tests/test_analysis_client.py
from unittest.mock import MagicMock, patch

import pytest
import requests

from starbuster.api.analysis_client import (
    AnalysisClient,
    parse_repo_reference,
    to_repo_url,
    validate_github_url,
)
from starbuster.core.errors import AnalysisServiceError, ErrorKind


def _response(status_code, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    response.text = text
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return AnalysisClient("http://service.test/", session=session, backoff=0)


def test_validate_github_url():
    assert validate_github_url("https://github.com/octo/widgets")
    assert validate_github_url("https://github.com/octo/widgets/")
    assert not validate_github_url("http://github.com/octo/widgets")
    assert not validate_github_url("https://gitlab.com/octo/widgets")
    assert not validate_github_url("https://github.com/octo")
    assert not validate_github_url("")


def test_parse_repo_reference():
    assert parse_repo_reference("octo/widgets") == ("octo", "widgets")
    assert parse_repo_reference("https://github.com/octo/widgets.git") == ("octo", "widgets")
    assert to_repo_url("https://github.com/octo/widgets/tree/main") == "https://github.com/octo/widgets"
    with pytest.raises(ValueError):
        parse_repo_reference("https://example.com/octo/widgets")
    with pytest.raises(ValueError):
        parse_repo_reference("widgets")


def test_analyze_posts_request(client, session, basic_payload):
    session.request.return_value = _response(200, basic_payload)

    result = client.analyze("https://github.com/octo/widgets", deep_analysis=True, max_stars=100, max_users=50)

    assert result == basic_payload
    session.request.assert_called_once_with(
        "POST",
        "http://service.test/api/analyze",
        json={
            "repoUrl": "https://github.com/octo/widgets",
            "deepAnalysis": True,
            "maxStars": 100,
            "maxUsers": 50,
        },
        timeout=client.timeout,
    )


def test_invalid_url_fails_before_request(client, session):
    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("not a url")

    assert exc_info.value.kind is ErrorKind.INVALID_INPUT
    session.request.assert_not_called()


def test_not_found(client, session):
    session.request.return_value = _response(404, {"error": "Repository not found"})

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/missing")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Repository not found"


def test_bad_request_uses_text_when_body_is_not_json(client, session):
    session.request.return_value = _response(400, text="Bad Request")

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/widgets")

    assert exc_info.value.kind is ErrorKind.INVALID_INPUT
    assert exc_info.value.message == "Bad Request"


def test_server_errors_are_retried(client, session):
    session.request.return_value = _response(500, {"error": "Internal Server Error"})

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/widgets")

    assert exc_info.value.kind is ErrorKind.SERVER_ERROR
    assert session.request.call_count == client.max_retries


def test_server_error_then_success(client, session, basic_payload):
    session.request.side_effect = [_response(502, text="Bad Gateway"), _response(200, basic_payload)]

    assert client.analyze("https://github.com/octo/widgets") == basic_payload
    assert session.request.call_count == 2


def test_network_errors(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError("connection refused")

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/widgets")

    assert exc_info.value.kind is ErrorKind.NETWORK_ERROR
    assert exc_info.value.status_code is None
    assert session.request.call_count == client.max_retries


def test_network_error_text_does_not_change_kind(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError(
        "HTTPConnectionPool(host='localhost', port=5000): Invalid response, 500 retries exceeded"
    )

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/widgets")

    assert exc_info.value.kind is ErrorKind.NETWORK_ERROR


def test_malformed_json_is_unknown(client, session):
    session.request.return_value = _response(200, text="<html>500 Internal</html>")

    with pytest.raises(AnalysisServiceError) as exc_info:
        client.analyze("https://github.com/octo/widgets")

    assert exc_info.value.kind is ErrorKind.UNKNOWN


def test_no_sleep_after_last_attempt(session):
    client = AnalysisClient("http://service.test/", session=session, backoff=1.5)
    session.request.return_value = _response(503, text="Service Unavailable")

    with patch("starbuster.api.analysis_client.time.sleep") as sleep:
        with pytest.raises(AnalysisServiceError):
            client.analyze("https://github.com/octo/widgets")

    assert session.request.call_count == client.max_retries
    assert sleep.call_count == client.max_retries - 1
    assert [c.args[0] for c in sleep.call_args_list] == [3.0, 4.5]
