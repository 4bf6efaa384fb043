"""
Tests for the extraction stages: page finder, page reducer, table
extractor and TSV normalization.

Run with: pytest tests/test_extraction.py -v
"""

import json

import pytest

from core.errors import (
    DetectionError, ExtractionError, InferenceError, ReductionError, SchemaConversionError,
)
from core.soe_types import SOE_HEADERS


HEADER_1 = "Procedure\tProtocol Section\tScreening\tD1\tD8\tD15\tC3+\tEOT\tFollow-up"
HEADER_2 = "\t\tD-28 to D-1\t\t\t\tEvery 3 weeks\t\tEvery 12 weeks"

SAMPLE_TSV = "\n".join([
    HEADER_1,
    HEADER_2,
    "Informed consent\t8.1\tX\t\t\t\t\t\t",
    "Vital signs\t8.3.1\tX\tX\tX\tX\tX\tX\t",
    "",
    HEADER_1,
    HEADER_2,
    "Survival\t11\t\t\t\t\t\t\tX",
])


class TestSoeFinder:
    """Tests for SOE page detection."""

    def test_parse_indices_from_prose(self):
        from extraction.soe_finder import parse_pdf_indices

        raw = 'Sure! Here is the JSON:\n{"pdf_indices": [3, 4]}'
        assert parse_pdf_indices(raw) == [3, 4]

    def test_parse_indices_filters_junk(self):
        """Negative, boolean and non-integral entries are dropped."""
        from extraction.soe_finder import parse_pdf_indices

        raw = json.dumps({"pdf_indices": [2, -1, True, 3.0, 4.5, "5"]})
        assert parse_pdf_indices(raw) == [2, 3]

    def test_parse_indices_wrong_shape(self):
        from extraction.soe_finder import parse_pdf_indices

        assert parse_pdf_indices('{"pages": [1]}') == []
        assert parse_pdf_indices('[1, 2]') == []
        assert parse_pdf_indices('no json') == []

    def test_detect_attaches_file(self, make_client):
        from extraction.soe_finder import detect_soe_pages, SOE_PAGE_DETECTION_PROMPT

        client = make_client(replies=['{"pdf_indices": [5, 6]}'])
        detected = detect_soe_pages(client, "file-1")

        assert detected.pdf_indices == [5, 6]
        assert detected.raw == '{"pdf_indices": [5, 6]}'
        assert client.calls == [(SOE_PAGE_DETECTION_PROMPT, ["file-1"])]

    def test_detect_empty_list_is_failure(self, make_client):
        from extraction.soe_finder import detect_soe_pages

        client = make_client(replies=['{"pdf_indices": []}'])
        with pytest.raises(DetectionError, match="No indices parsed"):
            detect_soe_pages(client, "file-1")

    def test_detect_inference_failure(self, make_client):
        from extraction.soe_finder import detect_soe_pages

        client = make_client(replies=[InferenceError("Missing text output from Responses API")])
        with pytest.raises(DetectionError, match="Missing text output"):
            detect_soe_pages(client, "file-1")


class TestPageReducer:
    """Tests for building the SOE-only PDF."""

    def test_build_keeps_requested_pages(self, four_page_pdf, read_pages):
        from extraction.page_reducer import build_soe_only_pdf

        reduced = build_soe_only_pdf(four_page_pdf, [1, 3])
        texts = read_pages(reduced.data)

        assert reduced.page_count == 2
        assert reduced.file_name == "soe_only.pdf"
        assert "Page 1" in texts[0]
        assert "Page 3" in texts[1]

    def test_base64_preview(self, four_page_pdf):
        import base64
        from extraction.page_reducer import build_soe_only_pdf

        reduced = build_soe_only_pdf(four_page_pdf, [2])
        assert base64.b64decode(reduced.to_base64()) == reduced.data

    def test_bad_index(self, four_page_pdf):
        from extraction.page_reducer import build_soe_only_pdf

        with pytest.raises(ReductionError, match="out of range"):
            build_soe_only_pdf(four_page_pdf, [7])


class TestTableExtractor:
    """Tests for TSV extraction."""

    def test_prompt_names_column_count(self):
        from extraction.table_extractor import TSV_EXTRACTION_PROMPT

        assert "EXACTLY 9 columns" in TSV_EXTRACTION_PROMPT

    def test_returns_text_verbatim(self, make_client):
        from extraction.table_extractor import extract_tsv

        client = make_client(replies=[SAMPLE_TSV])
        assert extract_tsv(client, "file-2") == SAMPLE_TSV
        assert client.calls[0][1] == ["file-2"]

    def test_blank_output_fails(self, make_client):
        from extraction.table_extractor import extract_tsv

        with pytest.raises(ExtractionError):
            extract_tsv(make_client(replies=["  \n "]), "file-2")

    def test_inference_failure(self, make_client):
        from extraction.table_extractor import extract_tsv

        client = make_client(replies=[InferenceError("responses.create failed", "500")])
        with pytest.raises(ExtractionError, match="TSV extraction failed"):
            extract_tsv(client, "file-2")


class TestColumnMapping:
    """Tests for the declarative column mapping."""

    def test_mapping_covers_every_key_once(self):
        """Nine columns, and each row key is fed by exactly one column."""
        from extraction.normalization import COLUMN_MAPPING

        keys = [key for keys in COLUMN_MAPPING for key in keys]
        assert len(COLUMN_MAPPING) == 9
        assert sorted(keys) == sorted(SOE_HEADERS)

    def test_shared_day_columns(self):
        from extraction.normalization import COLUMN_MAPPING

        assert COLUMN_MAPPING[3] == (
            "treatment_period_cycle_1_day_1", "treatment_period_cycle_2_day_1",
        )
        assert len(COLUMN_MAPPING[4]) == 2
        assert len(COLUMN_MAPPING[5]) == 2

    def test_prompt_renders_mapping(self):
        from extraction.normalization import build_schema_conversion_prompt

        prompt = build_schema_conversion_prompt("a\tb")
        assert "a\tb" in prompt
        assert '- Column 0 → "row_label"' in prompt
        assert "Column 3 applies to ALL of these keys" in prompt
        for key in SOE_HEADERS:
            assert f'"{key}"' in prompt


class TestLocalNormalizer:
    """Tests for normalize_tsv."""

    def test_repeated_headers_dropped(self):
        from extraction.normalization import normalize_tsv

        rows = normalize_tsv(SAMPLE_TSV)

        assert [r.row_label for r in rows] == ["Informed consent", "Vital signs", "Survival"]
        for row in rows:
            assert list(row.to_dict().keys()) == SOE_HEADERS

    def test_day_columns_fan_out(self):
        from extraction.normalization import normalize_tsv

        vitals = normalize_tsv(SAMPLE_TSV)[1]
        assert vitals.treatment_period_cycle_1_day_8 == "X"
        assert vitals.treatment_period_cycle_2_day_8 == "X"
        assert vitals.follow_up_every_12_weeks_up_to_3_years_from_eot == ""

    def test_short_and_long_rows(self):
        from extraction.normalization import normalize_tsv

        tsv = "ECG\t8.4\tX\nLabs\t8.5\t\t\t\t\t\t\tX\textra"
        short, long = normalize_tsv(tsv)
        assert short.screening == "X"
        assert short.eot == ""
        assert long.follow_up_every_12_weeks_up_to_3_years_from_eot == "X"

    @pytest.mark.parametrize("section", ["5.1, 10.1", "8.3.1/8.3.2", "Section 8.1", " 5 "])
    def test_first_row_with_compound_section_kept(self, section):
        """A first data row citing several sections is not mistaken for a header."""
        from extraction.normalization import normalize_tsv

        tsv = "\n".join([
            HEADER_1,
            f"Informed consent\t{section}\tX\t\t\t\t\t\t",
            "Vital signs\t8.3\tX\tX\t\t\t\t\t",
        ])
        rows = normalize_tsv(tsv)

        assert [r.row_label for r in rows] == ["Informed consent", "Vital signs"]
        assert rows[0].protocol_section == section.strip()

    def test_header_text_in_section_column(self):
        from extraction.normalization import split_header_rows, split_tsv

        rows = split_tsv("\n".join([HEADER_1, "\tSection\tD-28", "ECG\t8.4\tX"]))
        headers, data = split_header_rows(rows)
        assert len(headers) == 2
        assert data == [("ECG", "8.4", "X")]

    def test_no_data_rows(self):
        from extraction.normalization import normalize_tsv

        assert normalize_tsv(HEADER_1 + "\n" + HEADER_2) == []


class TestModelNormalizer:
    """Tests for convert_tsv_to_rows."""

    def test_rows_conformed(self, make_client):
        from extraction.normalization import convert_tsv_to_rows

        reply = json.dumps([
            {"row_label": "ECG", "protocol_section": "8.4", "screening": "X", "bogus": "y"},
        ])
        client = make_client(replies=[reply])
        rows = convert_tsv_to_rows(client, SAMPLE_TSV)

        assert len(rows) == 1
        data = rows[0].to_dict()
        assert list(data.keys()) == SOE_HEADERS
        assert data["screening"] == "X"
        assert data["eot"] == ""
        # conversion sends no file attachment
        assert client.calls[0][1] == []

    def test_prose_wrapped_array(self, make_client):
        from extraction.normalization import convert_tsv_to_rows

        client = make_client(replies=['Here you go:\n[{"row_label": "ECG"}]'])
        assert convert_tsv_to_rows(client, SAMPLE_TSV)[0].row_label == "ECG"

    def test_unparseable_output(self, make_client):
        from extraction.normalization import convert_tsv_to_rows

        with pytest.raises(SchemaConversionError, match="JSON conversion failed"):
            convert_tsv_to_rows(make_client(replies=["I cannot do that."]), SAMPLE_TSV)

    def test_object_instead_of_array(self, make_client):
        from extraction.normalization import convert_tsv_to_rows

        with pytest.raises(SchemaConversionError, match="expected an array"):
            convert_tsv_to_rows(make_client(replies=['{"rows": []}']), SAMPLE_TSV)

    def test_non_object_row(self, make_client):
        from extraction.normalization import conform_rows

        with pytest.raises(SchemaConversionError):
            conform_rows([{"row_label": "ECG"}, "oops"])
