# -*- coding: utf-8 -*-
"""
F. Validation — контрольные цифры ICAO 9303 и разумность дат
"""
from datetime import date
from typing import Optional

from mrz_capture.schemas import MRZDocument, MrzChecks

WEIGHTS = (7, 3, 1)


def _char_value(c: str) -> int:
    if c.isdigit():
        return int(c)
    if "A" <= c <= "Z":
        return ord(c) - ord("A") + 10
    return 0


def check_digit(field: str) -> str:
    """Контрольная цифра: веса 7-3-1, '<' = 0, A=10 … Z=35"""
    total = sum(_char_value(c) * WEIGHTS[i % 3] for i, c in enumerate(field))
    return str(total % 10)


def _verify(line: str, start: int, end: int) -> Optional[bool]:
    if len(line) <= end:
        return None
    digit = line[end]
    if digit == "<":
        # необязательное поле без данных
        digit = "0"
    return check_digit(line[start:end]) == digit


def _checks_for_line(line2: str) -> MrzChecks:
    composite = None
    if len(line2) >= 44:
        body = line2[0:10] + line2[13:20] + line2[21:43]
        composite = check_digit(body) == line2[43]
    return MrzChecks(
        document_number_ok=_verify(line2, 0, 9),
        birth_date_ok=_verify(line2, 13, 19),
        expiry_date_ok=_verify(line2, 21, 27),
        composite_ok=composite,
    )


def validate_mrz(
    line1: str,
    line2: str,
    document: MRZDocument,
    today: Optional[date] = None,
) -> tuple[MrzChecks, list[str]]:
    """Проверки без изменения документа. Возвращает (checks, warnings)."""
    today = today or date.today()
    checks = _checks_for_line(line2)
    warnings = []

    if checks.document_number_ok is False:
        warnings.append("Номер документа: неверная контрольная цифра")
    if checks.birth_date_ok is False:
        warnings.append("Дата рождения: неверная контрольная цифра")
    if checks.expiry_date_ok is False:
        warnings.append("Срок действия: неверная контрольная цифра")
    if checks.composite_ok is False:
        warnings.append("MRZ: неверная итоговая контрольная цифра")

    if not document.document_number:
        warnings.append("Номер документа не распознан")
    if not line1.startswith(("P", "I", "A", "C", "V")):
        warnings.append(f"Неизвестный тип документа '{document.document_type}'")

    birth = document.date_of_birth
    if birth is None:
        warnings.append("Дата рождения: не удалось разобрать")
    elif birth > today:
        warnings.append(f"Дата рождения в будущем ({birth.isoformat()})")

    expiry = document.date_of_expiry
    if expiry is None:
        warnings.append("Срок действия: не удалось разобрать")
    elif expiry < today:
        warnings.append(f"Срок действия документа истёк ({expiry.isoformat()})")

    return checks, warnings
