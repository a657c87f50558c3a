# -*- coding: utf-8 -*-
"""
Сессия съёмки: камера → снимок → (переснять) → OCR → MRZ → результат.

Состояния: IDLE → LIVE → CAPTURED → PROCESSING → IDLE (успех) | ERRORED.
Из ERRORED только retake (→ LIVE) или close (→ IDLE).

Сессия единолично владеет потоком камеры и удерживаемым снимком. Камера
освобождается при любом выходе из LIVE. retake/close увеличивают поколение:
результат пайплайна, пришедший для старого поколения, отбрасывается.
"""
import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import numpy as np

from mrz_capture.camera import Camera
from mrz_capture.config import MRZ_CENTURY_POLICY, MRZ_LINE_POLICY
from mrz_capture.errors import DeviceError, ErrorKind, OcrError, ScanError, SessionStateError
from mrz_capture.ocr_engines import OCREngine
from mrz_capture.parse import CenturyPolicy, LinePolicy
from mrz_capture.pipeline import recognize_document
from mrz_capture.schemas import ScanResult

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    LIVE = "live"
    CAPTURED = "captured"
    PROCESSING = "processing"
    ERRORED = "errored"


USER_MESSAGES = {
    ErrorKind.DEVICE: "Камера недоступна. Проверьте подключение и разрешение на доступ.",
    ErrorKind.OCR: "Не удалось прочитать документ. Переснимите при хорошем освещении.",
    ErrorKind.PARSE: "Не удалось найти машиночитаемую зону (MRZ). Поместите нижнюю часть страницы в рамку.",
}


@dataclass(frozen=True)
class SessionError:
    """Ошибка для показа пользователю; reason: техническая причина"""
    kind: ErrorKind
    message: str
    reason: str = ""
    details: dict = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: ScanError) -> "SessionError":
        return cls(
            kind=exc.kind,
            message=USER_MESSAGES[exc.kind],
            reason=exc.message,
            details=dict(exc.details),
        )


class CaptureSession:
    """Конечный автомат одной съёмки документа"""

    def __init__(
        self,
        engine: OCREngine,
        camera_factory: Callable[[], Camera] = Camera,
        on_result: Optional[Callable[[ScanResult], None]] = None,
        on_error: Optional[Callable[[SessionError], None]] = None,
        executor: Optional[Executor] = None,
        line_policy: LinePolicy = LinePolicy(MRZ_LINE_POLICY),
        century_policy: CenturyPolicy = CenturyPolicy(MRZ_CENTURY_POLICY),
    ):
        self.engine = engine
        self.camera_factory = camera_factory
        self.on_result = on_result
        self.on_error = on_error
        self.executor = executor
        self.line_policy = line_policy
        self.century_policy = century_policy

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._camera: Optional[Camera] = None
        self._image: Optional[np.ndarray] = None
        self._error: Optional[SessionError] = None
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def image(self) -> Optional[np.ndarray]:
        return self._image

    @property
    def error(self) -> Optional[SessionError]:
        return self._error

    @property
    def camera_open(self) -> bool:
        return self._camera is not None

    # --- внутренние переходы (вызываются под self._lock) ---

    def _set_state(self, new: SessionState) -> None:
        if new is not self._state:
            logger.info("Session %s -> %s", self._state.value, new.value)
        self._state = new

    def _require(self, allowed: tuple, op: str) -> None:
        if self._state not in allowed:
            raise SessionStateError(f"Нельзя выполнить {op} в состоянии {self._state.value}")

    def _release_camera(self) -> None:
        camera, self._camera = self._camera, None
        if camera is not None:
            camera.release()

    def _fail(self, exc: ScanError) -> SessionError:
        self._release_camera()
        self._image = None
        self._error = SessionError.from_exception(exc)
        self._set_state(SessionState.ERRORED)
        logger.warning("Session error: kind=%s", exc.kind.value)
        return self._error

    def _acquire_camera(self) -> Optional[SessionError]:
        camera = None
        opened = False
        try:
            camera = self.camera_factory()
            camera.open()
            opened = True
        except DeviceError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Camera open failed")
            return self._fail(DeviceError(f"Ошибка камеры: {type(e).__name__}"))
        finally:
            if not opened and camera is not None:
                camera.release()
        self._camera = camera
        self._error = None
        self._set_state(SessionState.LIVE)
        return None

    def _notify_error(self, error: Optional[SessionError]) -> None:
        if error is not None and self.on_error:
            self.on_error(error)

    # --- операции ---

    def start(self) -> None:
        """IDLE -> LIVE"""
        with self._lock:
            self._require((SessionState.IDLE,), "start")
            error = self._acquire_camera()
        self._notify_error(error)

    def capture(self) -> None:
        """LIVE -> CAPTURED: заморозить кадр, камеру остановить"""
        with self._lock:
            self._require((SessionState.LIVE,), "capture")
            error = None
            try:
                frame = self._camera.read()
            except DeviceError as e:
                error = self._fail(e)
            except Exception as e:
                logger.exception("Camera read failed")
                error = self._fail(DeviceError(f"Ошибка камеры: {type(e).__name__}"))
            else:
                self._image = frame.copy()
                self._set_state(SessionState.CAPTURED)
            finally:
                self._release_camera()
        self._notify_error(error)

    def retake(self) -> None:
        """CAPTURED | ERRORED | PROCESSING -> LIVE"""
        with self._lock:
            self._require(
                (SessionState.CAPTURED, SessionState.ERRORED, SessionState.PROCESSING),
                "retake",
            )
            self._generation += 1
            self._image = None
            self._error = None
            self._release_camera()
            error = self._acquire_camera()
        self._notify_error(error)

    def process(self) -> Optional[Future]:
        """
        CAPTURED -> PROCESSING. Повторный вызов во время обработки ничего не делает (None).
        Без executor пайплайн выполняется сразу, future уже завершён.
        """
        with self._lock:
            if self._state is SessionState.PROCESSING:
                logger.debug("process ignored: pipeline already running")
                return None
            self._require((SessionState.CAPTURED,), "process")
            self._set_state(SessionState.PROCESSING)
            generation = self._generation
            image = self._image

        if self.executor is not None:
            return self.executor.submit(self._run_pipeline, generation, image)

        future = Future()
        future.set_result(self._run_pipeline(generation, image))
        return future

    def close(self) -> None:
        """* -> IDLE: освободить камеру, сбросить снимок и ошибку"""
        with self._lock:
            self._generation += 1
            self._release_camera()
            self._image = None
            self._error = None
            self._set_state(SessionState.IDLE)

    # --- пайплайн ---

    def _run_pipeline(self, generation: int, image: np.ndarray) -> Optional[ScanResult]:
        try:
            result = recognize_document(self.engine, image, self.line_policy, self.century_policy)
        except ScanError as e:
            self._finish(generation, error=e)
            return None
        except Exception as e:
            logger.exception("Pipeline error (no PII in log)")
            self._finish(generation, error=OcrError(f"Ошибка обработки: {type(e).__name__}"))
            return None
        return result if self._finish(generation, result=result) else None

    def _finish(
        self,
        generation: int,
        result: Optional[ScanResult] = None,
        error: Optional[ScanError] = None,
    ) -> bool:
        with self._lock:
            if generation != self._generation or self._state is not SessionState.PROCESSING:
                logger.debug("Discarding stale pipeline result (generation %s)", generation)
                return False
            session_error = None
            if error is not None:
                session_error = self._fail(error)
            else:
                self._image = None
                self._set_state(SessionState.IDLE)

        if session_error is not None:
            self._notify_error(session_error)
        elif self.on_result:
            self.on_result(result)
        return True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
