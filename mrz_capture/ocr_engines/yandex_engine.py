# -*- coding: utf-8 -*-
"""Yandex Vision API OCR engine"""
import base64
import logging

import requests

from mrz_capture.config import OCR_TIMEOUT_SEC, YANDEX_VISION_API_KEY
from mrz_capture.errors import OcrError
from mrz_capture.ingest import encode_image
from mrz_capture.ocr_engines.base import OCREngine, OCRResult

logger = logging.getLogger(__name__)

YANDEX_URL = "https://vision.api.cloud.yandex.net/vision/v1/batchAnalyze"
# лимит API на размер content
MAX_CONTENT_BYTES = 900_000


def _text_from_response(data: dict) -> str:
    for res in (data.get("results") or []):
        for item in (res.get("results") or []):
            if item.get("error"):
                raise OcrError(f"Yandex Vision: {item['error'].get('message', 'error')}")
            td = item.get("textDetection") or {}
            lines = []
            for page in td.get("pages", []):
                for block in page.get("blocks", []):
                    for line in block.get("lines", []):
                        lt = " ".join(str(w.get("text", "")) for w in line.get("words", []))
                        if lt.strip():
                            lines.append(lt.strip())
            if lines:
                return "\n".join(lines)
    return ""


class YandexEngine(OCREngine):
    """Yandex Vision API (требует API key)"""

    def __init__(self, api_key: str | None = None, timeout: int | None = None):
        self.api_key = api_key or YANDEX_VISION_API_KEY
        self.timeout = timeout or OCR_TIMEOUT_SEC

    @property
    def name(self) -> str:
        return "yandex"

    def recognize(self, image) -> OCRResult:
        if not self.api_key:
            raise OcrError("YANDEX_VISION_API_KEY не задан")

        raw, _ = encode_image(image, ".jpg")
        if len(raw) > MAX_CONTENT_BYTES:
            raise OcrError(f"Снимок слишком большой для Yandex Vision ({len(raw)} байт)")

        headers = {"Authorization": f"Api-Key {self.api_key}", "Content-Type": "application/json"}
        body = {
            "analyze_specs": [{
                "content": base64.b64encode(raw).decode("utf-8"),
                "features": [{"type": "TEXT_DETECTION", "text_detection_config": {"language_codes": ["en"]}}]
            }]
        }
        try:
            r = requests.post(YANDEX_URL, json=body, headers=headers, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise OcrError(f"Yandex Vision request failed: {type(e).__name__}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise OcrError("Yandex Vision: Invalid JSON response") from e

        text = _text_from_response(data)
        if not text:
            raise OcrError("No text extracted")
        return OCRResult(text=text, confidence=0.85, engine=self.name)
