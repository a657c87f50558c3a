# -*- coding: utf-8 -*-
"""
B. Preprocess — вырезка полосы MRZ и бинаризация для локального OCR
"""
import cv2
import numpy as np


def to_gray(img: np.ndarray) -> np.ndarray:
    if len(img.shape) == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return img


def crop_mrz_band(img: np.ndarray, fraction: float = 0.3) -> np.ndarray:
    """Нижняя часть страницы, там MRZ"""
    h = img.shape[0]
    band = max(1, int(h * fraction))
    return img[h - band:, :]


def binarize(img: np.ndarray, scale: float = 2.0) -> np.ndarray:
    """Серый + Otsu + увеличение для мелкого шрифта OCR-B"""
    gray = to_gray(img)
    gray = cv2.GaussianBlur(gray, (3, 3), 0)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    if scale != 1.0:
        binary = cv2.resize(binary, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)
    return binary


def prepare_for_mrz(img: np.ndarray, band_fraction: float = 0.3) -> np.ndarray:
    return binarize(crop_mrz_band(img, band_fraction))
