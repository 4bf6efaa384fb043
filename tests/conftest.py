"""
Shared fixtures for the SOE2Schedule test suite.
"""

import fitz  # PyMuPDF
import pytest

from core.soe_types import SoeRow


def make_pdf(page_count: int) -> bytes:
    """Build an in-memory PDF whose pages read "Page N"."""
    doc = fitz.open()
    try:
        for i in range(page_count):
            page = doc.new_page()
            page.insert_text((72, 72), f"Page {i}")
        return doc.tobytes()
    finally:
        doc.close()


def page_texts(pdf_bytes: bytes):
    """Text layer of every page, in order."""
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


class FakeDocumentClient:
    """
    Stand-in for DocumentServiceClient.

    store() hands out sequential file ids; infer() replays queued replies
    (strings are returned, exceptions are raised) and records every call.
    store_error fails every upload; store_errors gives one outcome per
    upload (None succeeds, an exception is raised).
    """

    def __init__(self, replies=None, store_error=None, store_errors=None):
        self.replies = list(replies or [])
        self.store_error = store_error
        self.store_errors = list(store_errors or [])
        self.stored = []
        self.calls = []

    def store(self, data, filename):
        if self.store_error is not None:
            raise self.store_error
        if self.store_errors:
            error = self.store_errors.pop(0)
            if error is not None:
                raise error
        self.stored.append((filename, data))
        return f"file-{len(self.stored)}"

    def infer(self, prompt, file_ids=()):
        self.calls.append((prompt, list(file_ids)))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def four_page_pdf():
    return make_pdf(4)


@pytest.fixture
def sample_rows():
    return [
        SoeRow.from_dict({
            "row_label": "Informed consent",
            "protocol_section": "8.1",
            "screening": "X",
        }),
        SoeRow.from_dict({
            "row_label": "Vital signs",
            "protocol_section": "8.3.1",
            "screening": "X",
            "treatment_period_cycle_1_day_1": "X",
            "treatment_period_cycle_2_day_1": "X",
            "eot": "X",
        }),
        SoeRow.from_dict({
            "row_label": "Survival follow-up",
            "protocol_section": "8.9",
            "follow_up_every_12_weeks_up_to_3_years_from_eot": "X",
        }),
    ]


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def make_client():
    """Factory for FakeDocumentClient instances."""
    return FakeDocumentClient


@pytest.fixture
def read_pages():
    return page_texts
