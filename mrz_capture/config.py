# -*- coding: utf-8 -*-
"""Конфигурация из .env"""
import os

from dotenv import load_dotenv

load_dotenv()

# OCR
OCR_ENGINE = os.environ.get("OCR_ENGINE", "tesseract")
SCAN_API_URL = os.environ.get("SCAN_API_URL", "http://localhost:3000/api/scan")
SCAN_API_KEY = os.environ.get("SCAN_API_KEY", "")
YANDEX_VISION_API_KEY = os.environ.get("YANDEX_VISION_API_KEY", "")
OCR_TIMEOUT_SEC = int(os.environ.get("OCR_TIMEOUT_SEC", "30"))

# Camera
CAMERA_INDEX = int(os.environ.get("CAMERA_INDEX", "0"))
CAMERA_WIDTH = int(os.environ.get("CAMERA_WIDTH", "1920"))
CAMERA_HEIGHT = int(os.environ.get("CAMERA_HEIGHT", "1080"))

# Input
MAX_FILE_MB = int(os.environ.get("MAX_FILE_MB", "20"))

# MRZ: last_two | separator_scan, sliding | always_2000
MRZ_LINE_POLICY = os.environ.get("MRZ_LINE_POLICY", "last_two")
MRZ_CENTURY_POLICY = os.environ.get("MRZ_CENTURY_POLICY", "sliding")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
