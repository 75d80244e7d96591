"""Constants used across the escpos-buffer package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "escpos-buffer"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_PORT_PATH = "/dev/ttyUSB0"
DEFAULT_BAUD_RATE = 9600
DEFAULT_ENCODING = "utf-8"

DEFAULT_FEED_LINES = 2
MAX_FEED_LINES = 255
