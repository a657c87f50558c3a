# -*- coding: utf-8 -*-
"""
Удалённый OCR через HTTP-эндпоинт сканирования.
Запрос: {"base64": ..., "mimeType": ...}; ответ: {"text": ...} или {"error": ..., "details": ...}
"""
import base64
import logging

import requests

from mrz_capture.config import OCR_TIMEOUT_SEC, SCAN_API_KEY, SCAN_API_URL
from mrz_capture.errors import OcrError
from mrz_capture.ingest import encode_image
from mrz_capture.ocr_engines.base import OCREngine, OCRResult

logger = logging.getLogger(__name__)


class ScanApiEngine(OCREngine):
    """Document-intelligence сервис за HTTP. Любой сбой -> OcrError."""

    def __init__(self, url: str | None = None, api_key: str | None = None, timeout: int | None = None):
        self.url = url or SCAN_API_URL
        self.api_key = SCAN_API_KEY if api_key is None else api_key
        self.timeout = timeout or OCR_TIMEOUT_SEC

    @property
    def name(self) -> str:
        return "scanapi"

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def recognize(self, image) -> OCRResult:
        raw, mime_type = encode_image(image, ".png")
        body = {"base64": base64.b64encode(raw).decode("ascii"), "mimeType": mime_type}

        try:
            r = requests.post(self.url, json=body, headers=self._headers(), timeout=self.timeout)
        except requests.Timeout as e:
            raise OcrError(f"OCR request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise OcrError(f"OCR request failed: {type(e).__name__}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise OcrError("OCR request failed: Invalid JSON response") from e

        if not r.ok:
            error = data.get("error") if isinstance(data, dict) else None
            logger.warning("Scan API returned HTTP %s", r.status_code)
            raise OcrError(
                f"OCR request failed: {error or 'Unknown error'}",
                details={"status": r.status_code, "details": data.get("details") if isinstance(data, dict) else None},
            )

        text = data.get("text") if isinstance(data, dict) else None
        if not text:
            raise OcrError("No text extracted")
        return OCRResult(text=text, confidence=0.9, engine=self.name)
