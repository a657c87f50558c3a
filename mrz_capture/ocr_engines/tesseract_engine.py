# -*- coding: utf-8 -*-
"""Tesseract OCR engine (локальный, best-effort)"""
import logging

import pytesseract

from mrz_capture.ocr_engines.base import OCREngine, OCRResult
from mrz_capture.preprocess import prepare_for_mrz

logger = logging.getLogger(__name__)

MRZ_WHITELIST = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789<"


class TesseractEngine(OCREngine):
    """Tesseract по полосе MRZ. Ошибки движка -> пустой текст."""

    best_effort = True

    def __init__(self, band_fraction: float = 0.3, lang: str = "eng"):
        self.band_fraction = band_fraction
        self.lang = lang

    @property
    def name(self) -> str:
        return "tesseract"

    def recognize(self, image) -> OCRResult:
        try:
            prepared = prepare_for_mrz(image, self.band_fraction)
            config = f"--psm 6 -c tessedit_char_whitelist={MRZ_WHITELIST}"
            text = pytesseract.image_to_string(prepared, lang=self.lang, config=config)
            data = pytesseract.image_to_data(
                prepared, lang=self.lang, config=config, output_type=pytesseract.Output.DICT
            )
            confs = [float(c) for c in data.get("conf", []) if float(c) >= 0]
            conf = sum(confs) / len(confs) / 100.0 if confs else 0.0
            return OCRResult(text=text or "", confidence=min(1.0, max(0.0, conf)), engine=self.name)
        except Exception as e:
            logger.warning("Tesseract failed: %s", type(e).__name__)
            return OCRResult(text="", confidence=0, engine=self.name)
