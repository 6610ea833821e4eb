"""
Tests for the HTTP surface, using FastAPI's TestClient.
"""
import pydantic
import pytest
from fastapi.testclient import TestClient

from src.api.routes import get_exporter
from src.api.schemas import ExportRequest
from src.app.exceptions import get_http_exception
from src.app.main import app
from src.export import ValidationError
from src.export import exporter as exporter_module


ROWS_QUERY = "id\tname\n1\tAda"
ROWS_CSV = b'"id","name"\n"1","Ada"\n'


@pytest.fixture
def client(exporter):
    app.dependency_overrides[get_exporter] = lambda: exporter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_buffered_download(client, export_dir):
    response = client.post(
        "/export/csv",
        json={"query": ROWS_QUERY, "filename": "people.csv", "mode": "buffered"},
    )

    assert response.status_code == 200
    assert response.content == ROWS_CSV
    assert response.headers["content-type"] == "text/csv"
    assert response.headers["content-disposition"] == "attachment; filename=people.csv"
    assert response.headers["content-length"] == str(len(ROWS_CSV))
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["expires"] == "0"
    assert list(export_dir.iterdir()) == []


def test_streaming_download(client):
    response = client.post(
        "/export/csv",
        json={"query": ROWS_QUERY, "filename": "people.csv", "mode": "streaming"},
    )

    assert response.status_code == 200
    assert response.content == ROWS_CSV
    assert "content-length" not in response.headers
    assert response.headers["content-type"] == "text/csv"


def test_default_mode_is_buffered(client):
    response = client.post("/export/csv", json={"query": ROWS_QUERY, "filename": "people.csv"})

    assert response.headers["content-length"] == str(len(ROWS_CSV))


@pytest.mark.parametrize("body", [
    {"query": "", "filename": "people.csv"},
    {"query": "SELECT 1", "filename": ""},
])
def test_empty_input_is_a_bad_request(client, export_dir, body):
    response = client.post("/export/csv", json=body)

    assert response.status_code == 400
    assert response.json()["detail"]["status"] == "error"
    assert list(export_dir.iterdir()) == []


def test_unknown_mode_is_rejected_by_schema(client):
    response = client.post(
        "/export/csv",
        json={"query": "SELECT 1", "filename": "a.csv", "mode": "zip"},
    )

    assert response.status_code == 422


def test_missing_output_maps_to_bad_gateway(client, monkeypatch):
    def vanish(spec, timeout=None):
        spec.output_path.unlink()

    monkeypatch.setattr(exporter_module, "run_buffered", vanish)

    response = client.post("/export/csv", json={"query": "SELECT 1", "filename": "a.csv"})

    assert response.status_code == 502
    assert response.json()["detail"]["message"] == "The query produced no output file."


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-request-id"] == "abc-123"


def test_version_and_root(client):
    version = client.get("/version").json()
    root = client.get("/").json()

    assert version["version"] == root["version"]
    assert root["endpoints"]["export"] == "POST /export/csv"


def test_only_export_errors_use_the_status_map():
    with pytest.raises(pydantic.ValidationError) as excinfo:
        ExportRequest.model_validate({})

    assert get_http_exception(excinfo.value).status_code == 500
    assert get_http_exception(ValidationError("empty query")).status_code == 400
