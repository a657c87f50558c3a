# -*- coding: utf-8 -*-
"""
E. Parsing — разбор MRZ (ICAO 9303, две строки) из OCR-текста
"""
import re
from datetime import date
from enum import Enum
from typing import Optional

from mrz_capture.errors import ParseError, ParseFailure
from mrz_capture.schemas import MRZDocument

FILLER = "<"
NAME_SEPARATOR = "<<"


class LinePolicy(str, Enum):
    """Как выбрать пару строк MRZ из текста"""
    LAST_TWO = "last_two"
    SEPARATOR_SCAN = "separator_scan"


class CenturyPolicy(str, Enum):
    """Как превратить YY в полный год"""
    SLIDING = "sliding"
    ALWAYS_2000 = "always_2000"


def normalize_mrz_line(line: str) -> str:
    """Очистка строки MRZ: только A-Z, 0-9, <"""
    return re.sub(r"[^A-Z0-9<]", "", line.upper())


def _clean_name(s: str) -> str:
    return " ".join(s.replace(FILLER, " ").split())


def _non_empty_lines(text: str) -> list[str]:
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def select_mrz_lines(text: str, policy: LinePolicy = LinePolicy.LAST_TWO) -> tuple[str, str]:
    """
    Выбрать две строки MRZ.
    LAST_TWO: две последние непустые строки (MRZ внизу страницы).
    SEPARATOR_SCAN: первая строка с "<<" и следующая за ней.
    """
    lines = _non_empty_lines(text)
    if len(lines) < 2:
        raise ParseError(ParseFailure.TOO_FEW_LINES)

    if LinePolicy(policy) is LinePolicy.LAST_TWO:
        line1, line2 = lines[-2], lines[-1]
    else:
        idx = next(
            (i for i, ln in enumerate(lines) if NAME_SEPARATOR in normalize_mrz_line(ln)),
            -1,
        )
        if idx == -1 or idx + 1 >= len(lines):
            raise ParseError(ParseFailure.NO_MRZ_PAIR)
        line1, line2 = lines[idx], lines[idx + 1]

    return normalize_mrz_line(line1), normalize_mrz_line(line2)


def resolve_year(yy: int, century: CenturyPolicy = CenturyPolicy.SLIDING, today: Optional[date] = None) -> int:
    if CenturyPolicy(century) is CenturyPolicy.ALWAYS_2000:
        return 2000 + yy
    current = (today or date.today()).year % 100
    return 1900 + yy if yy > current else 2000 + yy


def convert_mrz_date(
    raw: str,
    century: CenturyPolicy = CenturyPolicy.SLIDING,
    today: Optional[date] = None,
) -> Optional[date]:
    """YYMMDD -> date или None, если месяц/день вне диапазона"""
    if not re.fullmatch(r"\d{6}", raw or ""):
        return None
    yy, mm, dd = int(raw[0:2]), int(raw[2:4]), int(raw[4:6])
    if not 1 <= mm <= 12 or not 1 <= dd <= 31:
        return None
    try:
        return date(resolve_year(yy, century, today), mm, dd)
    except ValueError:
        # 31.02 и подобные
        return None


def parse_mrz_lines(
    line1: str,
    line2: str,
    century: CenturyPolicy = CenturyPolicy.SLIDING,
    today: Optional[date] = None,
) -> MRZDocument:
    """
    Поля по фиксированным смещениям. Короткие строки дают пустые/усечённые
    значения, исключений нет.
    """
    name_parts = line1[5:].split(NAME_SEPARATOR)
    surname = _clean_name(name_parts[0])
    given_names = _clean_name(name_parts[1]) if len(name_parts) > 1 else ""

    return MRZDocument(
        document_type=line1[0:1],
        country_code=line1[2:5],
        surname=surname,
        given_names=given_names,
        document_number=line2[0:9].replace(FILLER, ""),
        nationality=line2[10:13],
        date_of_birth=convert_mrz_date(line2[13:19], century, today),
        sex=line2[20:21],
        date_of_expiry=convert_mrz_date(line2[21:27], century, today),
    )


def parse_mrz(
    text: str,
    policy: LinePolicy = LinePolicy.LAST_TWO,
    century: CenturyPolicy = CenturyPolicy.SLIDING,
    today: Optional[date] = None,
) -> MRZDocument:
    """OCR-текст -> MRZDocument. Бросает ParseError, если пары строк нет."""
    line1, line2 = select_mrz_lines(text, policy)
    return parse_mrz_lines(line1, line2, century, today)
