# -*- coding: utf-8 -*-
"""
A. Ingest — загрузка снимка из файла/байтов и кодирование для отправки
"""
import io
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from mrz_capture.config import MAX_FILE_MB

MAX_FILE_BYTES = MAX_FILE_MB * 1024 * 1024

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp")
MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


class IngestError(Exception):
    """Ошибка при приёме файла"""
    pass


def _pil_to_bgr(pil: Image.Image) -> np.ndarray:
    arr = np.array(pil.convert("RGB"))
    return arr[:, :, ::-1].copy()


def decode_image(data: bytes) -> np.ndarray:
    """bytes -> numpy array (BGR для OpenCV)"""
    if not data:
        raise IngestError("Пустое изображение")
    if len(data) > MAX_FILE_BYTES:
        raise IngestError(f"Файл слишком большой ({len(data) / 1024 / 1024:.1f} MB, макс {MAX_FILE_MB} MB)")
    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is not None:
        return img
    try:
        return _pil_to_bgr(Image.open(io.BytesIO(data)))
    except OSError as e:
        raise IngestError(f"Не удалось декодировать изображение: {e}") from e


def load_image(input_path: str) -> np.ndarray:
    """Загрузить изображение с диска"""
    path = Path(input_path)
    if not path.exists():
        raise IngestError(f"Файл не найден: {input_path}")
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise IngestError(f"Неподдерживаемый формат: {path.suffix}")
    return decode_image(path.read_bytes())


def encode_image(image: np.ndarray, fmt: str = ".png") -> tuple[bytes, str]:
    """numpy array -> (bytes, mime_type)"""
    ok, buf = cv2.imencode(fmt, image)
    if not ok:
        raise IngestError(f"Не удалось закодировать изображение в {fmt}")
    return buf.tobytes(), MIME_TYPES.get(fmt, "application/octet-stream")
