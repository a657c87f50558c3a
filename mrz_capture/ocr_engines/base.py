# -*- coding: utf-8 -*-
"""
Базовый интерфейс OCR-движка
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass
class OCRResult:
    """Результат OCR"""
    text: str
    confidence: float = 0.0
    engine: str = ""


class OCREngine(ABC):
    """
    Абстрактный OCR-движок.
    best_effort=True: сбой движка даёт пустой текст вместо OcrError.
    """

    best_effort: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def recognize(self, image: np.ndarray) -> OCRResult:
        """Распознать текст на снимке"""
        pass
