"""
Document Service Client - file storage and inference against OpenAI.

Two operations back every network-bound pipeline stage:
- store(): upload binary content (Files API), returning an opaque file id
- infer(): send an instruction plus stored file ids (Responses API),
  returning the primary text output

Usage:
    from core.llm_client import get_document_client

    client = get_document_client()
    file_id = client.store(pdf_bytes, "protocol.pdf")
    text = client.infer("Summarize the attached file.", [file_id])
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from openai import APIStatusError, OpenAI, OpenAIError

from core.constants import DEFAULT_MODEL, FILE_PURPOSE
from core.errors import InferenceError, MissingCredentialError, UploadError

logger = logging.getLogger(__name__)

# Load environment variables once at module level
_env_loaded = False


def _ensure_env_loaded():
    """Ensure .env is loaded exactly once."""
    global _env_loaded
    if not _env_loaded:
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(env_path)
        _env_loaded = True


def get_default_model() -> str:
    """Model from OPENAI_MODEL, falling back to DEFAULT_MODEL."""
    _ensure_env_loaded()
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def get_api_key() -> Optional[str]:
    """Return the OpenAI API key from the environment, or None."""
    _ensure_env_loaded()
    return os.environ.get("OPENAI_API_KEY") or None


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _first(items: Any) -> Any:
    if isinstance(items, (list, tuple)) and items:
        return items[0]
    return None


def primary_output_text(response: Any) -> Optional[str]:
    """
    Pull the primary text out of a Responses API result.

    Checks output[0].content[0].text first, then the flat output_text
    field. Works on SDK objects and plain dicts alike.
    """
    text = _field(_first(_field(_first(_field(response, "output")), "content")), "text")
    if isinstance(text, str) and text:
        return text
    text = _field(response, "output_text")
    if isinstance(text, str) and text:
        return text
    return None


def _status_detail(e: Exception) -> str:
    if isinstance(e, APIStatusError):
        return f"{e.status_code} {e.response.text}".strip()
    return str(e)


class DocumentServiceClient:
    """
    Thin wrapper around the OpenAI SDK for the two document-service calls.

    The SDK's own retries are disabled: a failed call is reported to the
    caller as that stage's error.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model or get_default_model()
        self.api_key = api_key or get_api_key()
        if client is None:
            if not self.api_key:
                raise MissingCredentialError("OPENAI_API_KEY environment variable not set")
            client = OpenAI(api_key=self.api_key, max_retries=0)
        self.client = client

    def store(self, data: bytes, filename: str) -> str:
        """
        Upload binary content for later reference.

        Args:
            data: Raw file bytes
            filename: Name reported to the service

        Returns:
            Opaque file id

        Raises:
            UploadError: On any transport or API failure
        """
        logger.info(f"Uploading {filename} ({len(data)} bytes)")
        try:
            uploaded = self.client.files.create(
                file=(filename or "input.pdf", data, "application/pdf"),
                purpose=FILE_PURPOSE,
            )
        except OpenAIError as e:
            raise UploadError("files.create failed", _status_detail(e)) from e

        file_id = _field(uploaded, "id")
        if not file_id:
            raise UploadError("files.create returned no file id")
        logger.info(f"Stored {filename} as {file_id}")
        return file_id

    def build_input(self, prompt: str, file_ids: Sequence[str] = ()) -> List[Dict[str, Any]]:
        """Build the single user message sent to the Responses API."""
        content: List[Dict[str, Any]] = [{"type": "input_text", "text": prompt}]
        for file_id in file_ids:
            content.append({"type": "input_file", "file_id": file_id})
        return [{"role": "user", "content": content}]

    def infer(self, prompt: str, file_ids: Sequence[str] = ()) -> str:
        """
        Submit an instruction (plus attached files) and return its text.

        Raises:
            InferenceError: On API failure or when no text output is present
        """
        try:
            response = self.client.responses.create(
                model=self.model,
                input=self.build_input(prompt, file_ids),
            )
        except OpenAIError as e:
            raise InferenceError("responses.create failed", _status_detail(e)) from e

        text = primary_output_text(response)
        if text is None:
            raise InferenceError("Missing text output from Responses API")
        return text

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model='{self.model}')"


def get_document_client(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
) -> DocumentServiceClient:
    """
    Get a configured document service client.

    Raises:
        MissingCredentialError: If no API key is configured
    """
    return DocumentServiceClient(model=model_name, api_key=api_key)
