"""
Tests for the HTTP adapter.

run_pipeline is wrapped so every request uses a FakeDocumentClient.

Run with: pytest tests/test_api.py -v
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

import api
from extraction.pipeline import run_pipeline


@pytest.fixture
def captured(monkeypatch, make_client):
    """Route api.run_pipeline through a fake client and record its inputs."""
    calls = {}
    client = make_client(replies=['{"pdf_indices": [0]}', "A\t1\tX", '[{"row_label": "A", "screening": "X"}]'])

    def fake_run(pdf_bytes, filename="input.pdf", flags=None, logger=None):
        calls["pdf_bytes"] = pdf_bytes
        calls["filename"] = filename
        calls["flags"] = flags
        return run_pipeline(pdf_bytes, filename, flags, client=client,
                            anchor=date(2025, 1, 1), logger=logger)

    monkeypatch.setattr(api, "run_pipeline", fake_run)
    return calls


@pytest.fixture
def http():
    return TestClient(api.app)


class TestProcessSoe:
    """Tests for POST /api/process-soe."""

    def test_all_stages(self, http, captured, four_page_pdf):
        form = {k: "1" for k in ("runUpload", "runDetect", "runReduce", "runTsv", "runJson")}
        response = http.post(
            "/api/process-soe",
            data=form,
            files={"file": ("protocol.pdf", four_page_pdf, "application/pdf")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["fileId"] == "file-1"
        assert body["soeFileId"] == "file-2"
        assert body["visits"] == [{"date": "2025-01-02", "label": "Screening", "events": ["A"]}]
        assert "csv" in body and "csv_display" in body
        assert captured["filename"] == "protocol.pdf"
        assert captured["pdf_bytes"] == four_page_pdf

    def test_flags_from_query(self, http, captured, four_page_pdf):
        response = http.post(
            "/api/process-soe?runDetect=1&includeSoePdf=1",
            files={"file": ("protocol.pdf", four_page_pdf, "application/pdf")},
        )

        assert response.status_code == 200
        flags = captured["flags"]
        assert flags.run_detect
        assert flags.include_soe_pdf
        assert not flags.run_tsv
        assert response.json()["pdfIndices"] == [0]

    def test_missing_file(self, http, captured):
        response = http.post("/api/process-soe", data={"runUpload": "1"})

        assert response.status_code == 200
        assert response.json() == {"visits": [], "uploadError": "No file provided"}
        assert captured["pdf_bytes"] is None

    def test_text_field_named_file_is_not_a_file(self, http, captured):
        response = http.post("/api/process-soe", data={"file": "nope", "runUpload": "1"})
        assert response.json()["uploadError"] == "No file provided"

    def test_no_flags(self, http, captured, four_page_pdf):
        response = http.post(
            "/api/process-soe",
            files={"file": ("protocol.pdf", four_page_pdf, "application/pdf")},
        )
        assert response.json() == {"visits": []}


def test_get_not_allowed(http):
    response = http.get("/api/process-soe")
    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}
