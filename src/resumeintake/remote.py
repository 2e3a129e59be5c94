"""HTTP clients for the remote PDF extractor and the extraction service."""

from __future__ import annotations

import base64
import json
import socket
from typing import Any
from urllib import error, request

import structlog

from .errors import RemoteServiceError, RemoteServiceUnavailable, TextTooShort

DEFAULT_TIMEOUT = 30.0


class _JSONHTTPClient:
    """POST JSON, map transport failures onto the intake error taxonomy."""

    service = "remote"

    def __init__(
        self,
        endpoint: str | None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/") if endpoint else None
        self._api_key = api_key
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._logger = structlog.get_logger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self._endpoint)

    def _post(self, url: str, payload: dict[str, Any]) -> tuple[int, Any]:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(url, data=data, headers=headers, method="POST")
        try:
            with request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
                body = resp.read().decode("utf-8")
        except error.HTTPError as exc:
            message = _error_message(exc)
            self._logger.warning(f"{self.service}.http_error", status=exc.code, error=message)
            raise RemoteServiceError(exc.code, message) from exc
        except (error.URLError, socket.timeout, ConnectionError) as exc:
            self._logger.warning(f"{self.service}.unreachable", error=str(exc))
            raise RemoteServiceUnavailable(
                f"Could not reach the {self.service} service: {exc}"
            ) from exc

        if not body:
            return status, {}
        try:
            return status, json.loads(body)
        except json.JSONDecodeError:
            return status, body


class HTTPPdfExtractorClient(_JSONHTTPClient):
    """Client for the remote PDF text extraction service.

    Sends ``{"file_name", "content_base64"}`` to ``<endpoint>/extract-resume-text``
    and expects ``{"text": ...}`` back.
    """

    service = "pdf_extractor"
    path = "/extract-resume-text"

    def extract(self, data: bytes, file_name: str | None = None) -> str:
        if not self._endpoint:
            raise RemoteServiceUnavailable(
                "PDF extraction requires the extractor service URL.",
                remediation="Set remote.pdf_endpoint in the configuration, or upload DOCX/TXT.",
            )

        payload = {
            "file_name": file_name or "resume.pdf",
            "content_base64": base64.b64encode(data).decode("ascii"),
        }
        self._logger.info("pdf_extractor.request", size=len(data))
        status, body = self._post(f"{self._endpoint}{self.path}", payload)

        if not isinstance(body, dict):
            raise RemoteServiceError(status, "The PDF extractor returned a malformed response.")
        text = body.get("text")
        if not isinstance(text, str) or not text.strip():
            raise TextTooShort(
                "Server extracted no text from the PDF.",
                remediation="The file may be empty, scanned or corrupted. Try DOCX or TXT.",
            )
        self._logger.info("pdf_extractor.response", length=len(text))
        return text


class HTTPStructuredExtractor(_JSONHTTPClient):
    """Structured extraction over HTTP; returns the raw answer unresolved."""

    service = "extraction"

    def generate(self, prompt: str) -> Any:
        if not self._endpoint:
            raise RemoteServiceUnavailable(
                "Structured extraction requires the extraction service URL.",
                remediation="Set remote.extraction_endpoint in the configuration.",
            )
        _, body = self._post(self._endpoint, {"prompt": prompt})
        return body


def _error_message(exc: error.HTTPError) -> str:
    try:
        raw = exc.read().decode("utf-8", errors="replace")
    except OSError:  # pragma: no cover - error path
        raw = ""
    try:
        data = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        data = {}
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return f"Server returned error: {exc.code}"


__all__ = ["DEFAULT_TIMEOUT", "HTTPPdfExtractorClient", "HTTPStructuredExtractor"]
