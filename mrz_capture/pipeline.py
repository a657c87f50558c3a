# -*- coding: utf-8 -*-
"""
Главный пайплайн: OCR → выбор строк MRZ → Parse → Validate → Output
"""
import logging
import time
from datetime import date
from typing import Optional

import numpy as np

from mrz_capture.config import MRZ_CENTURY_POLICY, MRZ_LINE_POLICY
from mrz_capture.errors import OcrError
from mrz_capture.ingest import load_image
from mrz_capture.ocr_engines import OCREngine, get_engine
from mrz_capture.parse import CenturyPolicy, LinePolicy, parse_mrz_lines, select_mrz_lines
from mrz_capture.schemas import DebugInfo, ScanResult
from mrz_capture.validate import validate_mrz

logger = logging.getLogger(__name__)

MIN_TEXT_CHARS = 5


def _ms(t: float) -> float:
    return round((time.perf_counter() - t) * 1000, 1)


def recognize_document(
    engine: OCREngine,
    image: np.ndarray,
    line_policy: LinePolicy = LinePolicy(MRZ_LINE_POLICY),
    century_policy: CenturyPolicy = CenturyPolicy(MRZ_CENTURY_POLICY),
    today: Optional[date] = None,
) -> ScanResult:
    """
    Распознать снимок и разобрать MRZ.
    Бросает OcrError (текста нет) или ParseError (нет пары строк MRZ).
    Не логирует распознанный текст.
    """
    timings = {}
    t0 = time.perf_counter()

    ocr_result = engine.recognize(image)
    timings["ocr"] = _ms(t0)

    text = (ocr_result.text or "") if ocr_result else ""
    if len("".join(text.split())) < MIN_TEXT_CHARS:
        logger.info("OCR (%s) returned no usable text", engine.name)
        raise OcrError(
            "Не удалось распознать текст (OCR пустой)",
            details={"engine": engine.name, "best_effort": engine.best_effort},
        )

    t1 = time.perf_counter()
    line1, line2 = select_mrz_lines(text, line_policy)
    document = parse_mrz_lines(line1, line2, century_policy, today)
    timings["parse"] = _ms(t1)

    checks, warnings = validate_mrz(line1, line2, document, today)
    timings["total"] = _ms(t0)

    logger.info(
        "MRZ parsed (engine=%s, checks_ok=%s, warnings=%d, %.1f ms)",
        engine.name, checks.all_ok, len(warnings), timings["total"],
    )
    return ScanResult(
        document=document,
        raw_text=text,
        checks=checks,
        warnings=warnings,
        debug=DebugInfo(
            timings_ms=timings,
            ocr_engine=engine.name,
            line_policy=LinePolicy(line_policy).value,
            century_policy=CenturyPolicy(century_policy).value,
        ),
    )


def process_image_file(
    image_path: str,
    ocr_engine_name: Optional[str] = None,
    **kwargs,
) -> ScanResult:
    """Обработать файл изображения (без камеры)"""
    img = load_image(image_path)
    return recognize_document(get_engine(ocr_engine_name), img, **kwargs)
