"""Configuration loader for escpos-buffer."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(frozen=True, slots=True)
class PrinterConfig:
    port_path: str
    baud_rate: int = constants.DEFAULT_BAUD_RATE
    auto_open: bool = True
    encoding: str = constants.DEFAULT_ENCODING  # Used for literal text only


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_serial: bool = False


@dataclass(slots=True)
class AppConfig:
    printer: PrinterConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "printer": {
                "port_path": constants.DEFAULT_PORT_PATH,
                "baud_rate": str(constants.DEFAULT_BAUD_RATE),
                "auto_open": "true",
                "encoding": constants.DEFAULT_ENCODING,
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_serial": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        baud_rate = parser.getint(
            "printer", "baud_rate", fallback=constants.DEFAULT_BAUD_RATE
        )
    except ValueError:
        baud_rate = constants.DEFAULT_BAUD_RATE
    if baud_rate <= 0:
        baud_rate = constants.DEFAULT_BAUD_RATE

    printer = PrinterConfig(
        port_path=parser.get("printer", "port_path").strip(),
        baud_rate=baud_rate,
        auto_open=parser.getboolean("printer", "auto_open", fallback=True),
        encoding=parser.get(
            "printer", "encoding", fallback=constants.DEFAULT_ENCODING
        ).strip()
        or constants.DEFAULT_ENCODING,
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_serial=parser.getboolean("logging", "log_serial", fallback=False),
    )

    return AppConfig(
        printer=printer,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )
