# -*- coding: utf-8 -*-
"""
Камера: открытие потока, чтение одного кадра, освобождение устройства
"""
import logging

import cv2
import numpy as np

from mrz_capture.config import CAMERA_HEIGHT, CAMERA_INDEX, CAMERA_WIDTH
from mrz_capture.errors import DeviceError

logger = logging.getLogger(__name__)


class Camera:
    """Обёртка над cv2.VideoCapture"""

    def __init__(self, index: int = CAMERA_INDEX, width: int = CAMERA_WIDTH, height: int = CAMERA_HEIGHT):
        self.index = index
        self.width = width
        self.height = height
        self._capture = None

    def open(self) -> None:
        """Открыть поток. DeviceError, если камера недоступна."""
        if self.is_opened():
            return
        capture = cv2.VideoCapture(self.index)
        if not capture.isOpened():
            capture.release()
            logger.error("Failed to open camera at index %s", self.index)
            raise DeviceError(
                f"Камера {self.index} недоступна",
                details={"camera_index": self.index},
            )
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._capture = capture
        logger.info("Camera %s opened", self.index)

    def is_opened(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def read(self) -> np.ndarray:
        """Один кадр из потока (BGR)"""
        if not self.is_opened():
            raise DeviceError("Камера не инициализирована", details={"camera_index": self.index})
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise DeviceError("Не удалось получить кадр с камеры", details={"camera_index": self.index})
        return frame

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera %s released", self.index)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.release()
