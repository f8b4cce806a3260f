import logging
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import task_api.middleware.request_logging as logging_mod


@pytest.fixture
def mock_instruments():
    mock_counter = MagicMock()
    mock_histogram = MagicMock()
    logging_mod._meter = MagicMock()
    logging_mod._request_count = mock_counter
    logging_mod._request_duration = mock_histogram
    with patch.object(logging_mod, "_init_metrics"):
        yield mock_counter, mock_histogram
    logging_mod._meter = None
    logging_mod._request_count = None
    logging_mod._request_duration = None


def test_request_is_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="task_api.access"):
        response = client.get("/api/tasks/")

    assert response.status_code == 200
    messages = [r.getMessage() for r in caplog.records if r.name == "task_api.access"]
    assert len(messages) == 1
    assert messages[0].startswith('"GET /api/tasks/" 200 ')
    assert messages[0].endswith("ms")


def test_error_status_is_logged(
    failing_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="task_api.access"):
        failing_client.delete("/api/tasks/3")

    messages = [r.getMessage() for r in caplog.records if r.name == "task_api.access"]
    assert messages[0].startswith('"DELETE /api/tasks/3" 500 ')


def test_preflight_is_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="task_api.access"):
        client.options("/api/tasks/")

    messages = [r.getMessage() for r in caplog.records if r.name == "task_api.access"]
    assert messages[0].startswith('"OPTIONS /api/tasks/" 200 ')


def test_middleware_records_request_count(client: TestClient, mock_instruments) -> None:
    mock_counter, _ = mock_instruments

    response = client.get("/")
    assert response.status_code == 200

    mock_counter.add.assert_called_once()
    call_args = mock_counter.add.call_args
    assert call_args.args[0] == 1
    attrs = call_args.args[1]
    assert attrs["http.request.method"] == "GET"
    assert attrs["http.route"] == "/"
    assert attrs["http.response.status_code"] == 200


def test_middleware_records_request_duration(client: TestClient, mock_instruments) -> None:
    _, mock_histogram = mock_instruments

    client.post("/api/tasks/", json={"task": "x", "completed": False})

    mock_histogram.record.assert_called_once()
    duration, attrs = mock_histogram.record.call_args.args
    assert duration > 0
    assert attrs["http.request.method"] == "POST"
    assert attrs["http.response.status_code"] == 201


def test_middleware_records_400(client: TestClient, mock_instruments) -> None:
    mock_counter, _ = mock_instruments

    client.put("/api/tasks/1", content="{", headers={"Content-Type": "application/json"})

    attrs = mock_counter.add.call_args.args[1]
    assert attrs["http.response.status_code"] == 400
