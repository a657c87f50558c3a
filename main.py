#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Точка входа: распознавание MRZ паспорта/ID из файла или с камеры.
Снимок → OCR → поля MRZ в JSON.
"""
import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor

from mrz_capture.config import CAMERA_INDEX, LOG_LEVEL, MRZ_CENTURY_POLICY, MRZ_LINE_POLICY
from mrz_capture.errors import ScanError
from mrz_capture.ingest import IngestError
from mrz_capture.parse import CenturyPolicy, LinePolicy


def setup_logging():
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _print_json(data: dict) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def cmd_scan(args) -> int:
    from mrz_capture.pipeline import process_image_file

    try:
        result = process_image_file(
            args.image,
            args.engine,
            line_policy=LinePolicy(args.line_policy),
            century_policy=CenturyPolicy(args.century),
        )
    except ScanError as e:
        _print_json(e.to_dict())
        return 1
    except IngestError as e:
        _print_json({"error": str(e), "kind": "ingest"})
        return 1
    _print_json(result.to_dict())
    return 0


def cmd_camera(args) -> int:
    from mrz_capture.camera import Camera
    from mrz_capture.ocr_engines import get_engine
    from mrz_capture.session import CaptureSession, SessionState

    def on_result(result):
        _print_json(result.to_dict())

    def on_error(error):
        print(f"⚠️ {error.message} ({error.reason})")
        print("r — переснять, q — выход")

    executor = ThreadPoolExecutor(max_workers=1)
    session = CaptureSession(
        engine=get_engine(args.engine),
        camera_factory=lambda: Camera(index=args.index),
        on_result=on_result,
        on_error=on_error,
        executor=executor,
        line_policy=LinePolicy(args.line_policy),
        century_policy=CenturyPolicy(args.century),
    )

    try:
        with session:
            session.start()
            while True:
                if session.state is SessionState.LIVE:
                    prompt = "Enter — снимок, q — выход: "
                elif session.state is SessionState.CAPTURED:
                    prompt = "p — распознать, r — переснять, q — выход: "
                elif session.state is SessionState.IDLE:
                    prompt = "s — новая съёмка, q — выход: "
                else:
                    prompt = "r — переснять, q — выход: "

                cmd = input(prompt).strip().lower()
                if cmd == "q":
                    break
                if session.state is SessionState.LIVE and cmd == "":
                    session.capture()
                elif cmd == "p" and session.state is SessionState.CAPTURED:
                    future = session.process()
                    print("🔍 Обрабатываю...")
                    if future is not None:
                        future.result()
                elif cmd == "r" and session.state in (
                    SessionState.CAPTURED, SessionState.ERRORED, SessionState.PROCESSING
                ):
                    session.retake()
                elif cmd == "s" and session.state is SessionState.IDLE:
                    session.start()
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Распознавание MRZ документа")
    parser.add_argument("--engine", default=None, help="tesseract | scanapi | yandex")
    parser.add_argument(
        "--line-policy",
        default=MRZ_LINE_POLICY,
        choices=[p.value for p in LinePolicy],
    )
    parser.add_argument(
        "--century",
        default=MRZ_CENTURY_POLICY,
        choices=[p.value for p in CenturyPolicy],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="распознать файл изображения")
    scan.add_argument("image")
    scan.set_defaults(func=cmd_scan)

    camera = sub.add_parser("camera", help="съёмка с камеры")
    camera.add_argument("--index", type=int, default=CAMERA_INDEX)
    camera.set_defaults(func=cmd_camera)
    return parser


def main(argv=None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
