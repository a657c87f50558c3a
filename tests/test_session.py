# -*- coding: utf-8 -*-
"""Тесты конечного автомата сессии съёмки"""
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from mrz_capture.errors import DeviceError, ErrorKind, OcrError, SessionStateError
from mrz_capture.ocr_engines import OCREngine, OCRResult
from mrz_capture.schemas import ScanResult
from mrz_capture.session import USER_MESSAGES, CaptureSession, SessionState

SPECIMEN = (
    "PASSPORT\n"
    "P<UTORESIDENT<<JOHN<<<<<<<<<<<<<<<<<<<<<<<\n"
    "L898902C36UTO7408122M1204159ZE184226B<<<<<10\n"
)


class FakeCamera:
    def __init__(self, fail_open=False, fail_read=False, crash_open=False, crash_read=False):
        self.fail_open = fail_open
        self.fail_read = fail_read
        self.crash_open = crash_open
        self.crash_read = crash_read
        self.opened = False
        self.release_count = 0

    def open(self):
        if self.fail_open:
            raise DeviceError("Permission denied")
        if self.crash_open:
            raise RuntimeError("backend exploded")
        self.opened = True

    def read(self):
        if self.crash_read:
            raise RuntimeError("backend exploded")
        if self.fail_read:
            raise DeviceError("Не удалось получить кадр с камеры")
        return np.full((40, 120, 3), 200, dtype=np.uint8)

    def release(self):
        self.release_count += 1
        self.opened = False


class CameraFactory:
    """Выдаёт камеры по очереди, запоминает все выданные"""

    def __init__(self, *specs):
        self.specs = list(specs)
        self.cameras = []

    def __call__(self):
        spec = self.specs.pop(0) if self.specs else {}
        cam = FakeCamera(**spec)
        self.cameras.append(cam)
        return cam

    def none_open(self):
        return all(not c.opened for c in self.cameras)


class FakeEngine(OCREngine):
    def __init__(self, text=SPECIMEN, error=None, gate=None):
        self.text = text
        self.error = error
        self.gate = gate
        self.calls = 0

    @property
    def name(self):
        return "fake"

    def recognize(self, image):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return OCRResult(text=self.text, confidence=1.0, engine=self.name)


class Recorder:
    def __init__(self):
        self.results = []
        self.errors = []

    def on_result(self, result):
        self.results.append(result)

    def on_error(self, error):
        self.errors.append(error)


def make_session(engine=None, factory=None, executor=None):
    rec = Recorder()
    factory = factory or CameraFactory()
    session = CaptureSession(
        engine=engine or FakeEngine(),
        camera_factory=factory,
        on_result=rec.on_result,
        on_error=rec.on_error,
        executor=executor,
    )
    return session, factory, rec


def test_happy_path():
    session, factory, rec = make_session()
    assert session.state is SessionState.IDLE

    session.start()
    assert session.state is SessionState.LIVE
    assert session.camera_open
    assert factory.cameras[0].opened

    session.capture()
    assert session.state is SessionState.CAPTURED
    assert session.image is not None
    assert not session.camera_open
    assert factory.cameras[0].release_count == 1

    result = session.process().result()
    assert isinstance(result, ScanResult)
    assert result.document.document_number == "L898902C3"
    assert result.raw_text == SPECIMEN
    assert rec.results == [result]
    assert rec.errors == []
    assert session.state is SessionState.IDLE
    assert session.image is None


def test_start_device_failure():
    session, factory, rec = make_session(factory=CameraFactory({"fail_open": True}))
    session.start()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.DEVICE
    assert session.error.message == USER_MESSAGES[ErrorKind.DEVICE]
    assert session.error.reason == "Permission denied"
    assert rec.errors == [session.error]
    assert factory.cameras[0].release_count == 1
    assert not session.camera_open

    session.retake()
    assert session.state is SessionState.LIVE
    assert session.error is None
    session.close()
    assert factory.none_open()


def test_capture_read_failure_releases_camera():
    session, factory, rec = make_session(factory=CameraFactory({"fail_read": True}))
    session.start()
    session.capture()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.DEVICE
    assert session.image is None
    assert factory.cameras[0].release_count == 1


def test_unexpected_read_error_becomes_device_error():
    session, factory, rec = make_session(factory=CameraFactory({"crash_read": True}))
    session.start()
    session.capture()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.DEVICE
    assert session.error.reason == "Ошибка камеры: RuntimeError"
    assert rec.errors == [session.error]
    assert not session.camera_open
    assert factory.cameras[0].release_count == 1

    session.retake()
    assert session.state is SessionState.LIVE
    session.capture()
    assert session.state is SessionState.CAPTURED


def test_unexpected_open_error_on_start():
    session, factory, _ = make_session(factory=CameraFactory({"crash_open": True}))
    session.start()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.DEVICE
    assert factory.cameras[0].release_count == 1
    assert not session.camera_open


def test_unexpected_open_error_on_retake():
    session, factory, _ = make_session(factory=CameraFactory({}, {"crash_open": True}))
    session.start()
    session.capture()
    session.retake()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.DEVICE
    assert session.image is None
    assert factory.none_open()
    assert factory.cameras[1].release_count == 1


def test_unexpected_open_error_on_retake_while_processing():
    gate = threading.Event()
    factory = CameraFactory({}, {"crash_open": True}, {})
    with ThreadPoolExecutor(max_workers=2) as executor:
        session, _, rec = make_session(engine=FakeEngine(gate=gate), factory=factory, executor=executor)
        session.start()
        session.capture()
        future = session.process()
        session.retake()
        assert session.state is SessionState.ERRORED
        gate.set()
        assert future.result(timeout=5) is None

    assert session.state is SessionState.ERRORED
    assert rec.results == []
    session.retake()
    assert session.state is SessionState.LIVE


def test_retake_discards_image_and_reopens_camera():
    session, factory, _ = make_session()
    session.start()
    session.capture()
    session.retake()
    assert session.state is SessionState.LIVE
    assert session.image is None
    assert len(factory.cameras) == 2
    assert factory.cameras[0].release_count == 1
    assert factory.cameras[1].opened


def test_empty_ocr_text_is_ocr_error():
    session, _, rec = make_session(engine=FakeEngine(text="  \n "))
    session.start()
    session.capture()
    assert session.process().result() is None
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.OCR
    assert session.error.message == USER_MESSAGES[ErrorKind.OCR]
    assert rec.results == []


def test_ocr_failure():
    session, _, rec = make_session(engine=FakeEngine(error=OcrError("OCR request failed: quota")))
    session.start()
    session.capture()
    session.process()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.OCR
    assert session.error.reason == "OCR request failed: quota"
    assert len(rec.errors) == 1


def test_parse_failure_distinguished_from_ocr():
    session, _, rec = make_session(engine=FakeEngine(text="ONLY ONE LINE OF TEXT"))
    session.start()
    session.capture()
    session.process()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.PARSE
    assert session.error.message == USER_MESSAGES[ErrorKind.PARSE]
    assert session.error.message != USER_MESSAGES[ErrorKind.OCR]
    assert session.error.details["reason"] == "too_few_lines"


def test_unexpected_engine_exception_becomes_error():
    session, _, _ = make_session(engine=FakeEngine(error=RuntimeError("boom")))
    session.start()
    session.capture()
    session.process()
    assert session.state is SessionState.ERRORED
    assert session.error.kind is ErrorKind.OCR


def test_retake_from_error():
    session, factory, _ = make_session(engine=FakeEngine(text="x"))
    session.start()
    session.capture()
    session.process()
    assert session.state is SessionState.ERRORED
    session.retake()
    assert session.state is SessionState.LIVE
    assert session.error is None
    assert factory.cameras[-1].opened


def _to_live(session):
    session.start()


def _to_captured(session):
    session.start()
    session.capture()


def _to_errored(session):
    session.engine = FakeEngine(text="")
    session.start()
    session.capture()
    session.process()


@pytest.mark.parametrize("setup", [lambda s: None, _to_live, _to_captured, _to_errored])
def test_close_from_any_state(setup):
    session, factory, _ = make_session()
    setup(session)
    session.close()
    assert session.state is SessionState.IDLE
    assert session.image is None
    assert session.error is None
    assert not session.camera_open
    assert factory.none_open()
    assert all(c.release_count <= 1 for c in factory.cameras)


def test_close_while_processing_discards_late_result():
    gate = threading.Event()
    engine = FakeEngine(gate=gate)
    with ThreadPoolExecutor(max_workers=2) as executor:
        session, factory, rec = make_session(engine=engine, executor=executor)
        session.start()
        session.capture()
        future = session.process()
        assert session.state is SessionState.PROCESSING

        session.close()
        gate.set()
        assert future.result(timeout=5) is None

    assert session.state is SessionState.IDLE
    assert rec.results == []
    assert rec.errors == []
    assert factory.none_open()


def test_retake_while_processing_discards_late_result():
    gate = threading.Event()
    engine = FakeEngine(gate=gate)
    with ThreadPoolExecutor(max_workers=2) as executor:
        session, _, rec = make_session(engine=engine, executor=executor)
        session.start()
        session.capture()
        future = session.process()
        session.retake()
        gate.set()
        assert future.result(timeout=5) is None

    assert session.state is SessionState.LIVE
    assert session.image is None
    assert rec.results == []


def test_second_process_while_processing_is_noop():
    gate = threading.Event()
    engine = FakeEngine(gate=gate)
    with ThreadPoolExecutor(max_workers=2) as executor:
        session, _, rec = make_session(engine=engine, executor=executor)
        session.start()
        session.capture()
        first = session.process()
        assert session.process() is None
        assert session.state is SessionState.PROCESSING
        gate.set()
        result = first.result(timeout=5)

    assert engine.calls == 1
    assert rec.results == [result]
    assert session.state is SessionState.IDLE


@pytest.mark.parametrize("op", ["capture", "process", "retake"])
def test_invalid_transition_from_idle(op):
    session, _, _ = make_session()
    with pytest.raises(SessionStateError):
        getattr(session, op)()
    assert session.state is SessionState.IDLE


def test_start_twice_rejected():
    session, factory, _ = make_session()
    session.start()
    with pytest.raises(SessionStateError):
        session.start()
    assert len(factory.cameras) == 1
    session.close()


def test_context_manager_releases_camera():
    factory = CameraFactory()
    with CaptureSession(engine=FakeEngine(), camera_factory=factory) as session:
        session.start()
        assert factory.cameras[0].opened
    assert session.state is SessionState.IDLE
    assert factory.none_open()
