# -*- coding: utf-8 -*-
"""
MRZ capture pipeline: снимок документа → OCR → поля машиночитаемой зоны
"""
from mrz_capture.errors import DeviceError, OcrError, ParseError, ScanError
from mrz_capture.parse import parse_mrz
from mrz_capture.pipeline import recognize_document, process_image_file
from mrz_capture.schemas import MRZDocument, ScanResult
from mrz_capture.session import CaptureSession, SessionState

__all__ = [
    "CaptureSession",
    "DeviceError",
    "MRZDocument",
    "OcrError",
    "ParseError",
    "ScanError",
    "ScanResult",
    "SessionState",
    "parse_mrz",
    "process_image_file",
    "recognize_document",
]
