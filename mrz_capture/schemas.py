# -*- coding: utf-8 -*-
"""
Схемы результата: поля MRZ, проверки, отладка
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MRZDocument(BaseModel):
    """Поля документа из MRZ. Дата None: не удалось разобрать."""
    model_config = ConfigDict(frozen=True)

    document_type: str = ""
    country_code: str = ""
    surname: str = ""
    given_names: str = ""
    document_number: str = ""
    nationality: str = ""
    date_of_birth: Optional[date] = None
    sex: str = ""
    date_of_expiry: Optional[date] = None


class MrzChecks(BaseModel):
    """Контрольные цифры ICAO 9303 (None: строка слишком короткая)"""
    document_number_ok: Optional[bool] = None
    birth_date_ok: Optional[bool] = None
    expiry_date_ok: Optional[bool] = None
    composite_ok: Optional[bool] = None

    @property
    def all_ok(self) -> bool:
        values = [
            self.document_number_ok,
            self.birth_date_ok,
            self.expiry_date_ok,
            self.composite_ok,
        ]
        return all(v is not False for v in values)


class DebugInfo(BaseModel):
    """Отладочная информация (без PII)"""
    pipeline_version: str = "v1"
    timings_ms: dict = Field(default_factory=dict)
    ocr_engine: str = ""
    line_policy: str = ""
    century_policy: str = ""


class ScanResult(BaseModel):
    """Результат распознавания для предзаполнения формы"""
    document: MRZDocument
    raw_text: str = ""
    checks: MrzChecks = Field(default_factory=MrzChecks)
    warnings: list[str] = Field(default_factory=list)
    debug: DebugInfo = Field(default_factory=DebugInfo)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
