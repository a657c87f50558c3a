# -*- coding: utf-8 -*-
"""
Ошибки пайплайна: камера, OCR, разбор MRZ
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Тип ошибки для сообщения пользователю"""
    DEVICE = "device"
    OCR = "ocr"
    PARSE = "parse"


class ParseFailure(str, Enum):
    TOO_FEW_LINES = "too_few_lines"
    NO_MRZ_PAIR = "no_mrz_pair"


class ScanError(Exception):
    """Базовая ошибка сканирования"""
    kind: ErrorKind = ErrorKind.OCR

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "kind": self.kind.value,
            "details": self.details,
        }


class DeviceError(ScanError):
    """Камера недоступна или доступ запрещён"""
    kind = ErrorKind.DEVICE


class OcrError(ScanError):
    """Распознавание не удалось или вернуло непригодный текст"""
    kind = ErrorKind.OCR


class ParseError(ScanError):
    """В тексте не найдена пара строк MRZ"""
    kind = ErrorKind.PARSE

    def __init__(self, reason: ParseFailure, message: str | None = None):
        self.reason = reason
        super().__init__(
            message or _PARSE_MESSAGES[reason],
            details={"reason": reason.value},
        )


_PARSE_MESSAGES = {
    ParseFailure.TOO_FEW_LINES: "Invalid MRZ: less than 2 lines detected",
    ParseFailure.NO_MRZ_PAIR: "Invalid MRZ: could not find two consecutive MRZ lines",
}


class SessionStateError(RuntimeError):
    """Переход недопустим в текущем состоянии сессии"""
    pass
