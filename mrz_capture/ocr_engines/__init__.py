# -*- coding: utf-8 -*-
"""Плагинные OCR-движки"""
from mrz_capture.config import OCR_ENGINE
from mrz_capture.ocr_engines.base import OCREngine, OCRResult
from mrz_capture.ocr_engines.scan_api_engine import ScanApiEngine
from mrz_capture.ocr_engines.tesseract_engine import TesseractEngine
from mrz_capture.ocr_engines.yandex_engine import YandexEngine

ENGINES = {
    "tesseract": TesseractEngine,
    "scanapi": ScanApiEngine,
    "yandex": YandexEngine,
}


def get_engine(name: str | None = None) -> OCREngine:
    """Получить OCR-движок по имени. name: tesseract|scanapi|yandex"""
    engine = (name or OCR_ENGINE).lower()
    try:
        return ENGINES[engine]()
    except KeyError:
        raise ValueError(f"Неизвестный OCR-движок: {engine}") from None


__all__ = ["OCREngine", "OCRResult", "ScanApiEngine", "TesseractEngine", "YandexEngine", "get_engine"]
