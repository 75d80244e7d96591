from pathlib import Path

import pytest

from escpos_buffer import constants
from escpos_buffer.config import PrinterConfig, load_config


def test_load_config_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "escpos-buffer.cfg"
    config = load_config(config_path)

    assert config.path == config_path
    assert config.printer.port_path == constants.DEFAULT_PORT_PATH
    assert config.printer.baud_rate == 9600
    assert config.printer.auto_open is True
    assert config.printer.encoding == "utf-8"
    assert config.logging.level == "INFO"
    assert config.logging.path is None
    assert config.logging.log_serial is False


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "escpos-buffer.cfg"
    config_path.write_text(
        """
[printer]
port_path = /dev/ttyS1
baud_rate = 19200
auto_open = false
encoding = cp437

[logging]
level = DEBUG
path = ~/logs/printer.log
log_serial = true
        """.strip()
        + "\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.printer == PrinterConfig(
        port_path="/dev/ttyS1", baud_rate=19200, auto_open=False, encoding="cp437"
    )
    assert config.logging.level == "DEBUG"
    assert config.logging.path == Path("~/logs/printer.log").expanduser()
    assert config.logging.log_serial is True
    assert config.raw.get("printer", "port_path") == "/dev/ttyS1"


@pytest.mark.parametrize("value", ["fast", "0", "-9600"])
def test_load_config_rejects_bad_baud_rate(tmp_path: Path, value: str) -> None:
    config_path = tmp_path / "escpos-buffer.cfg"
    config_path.write_text(f"[printer]\nbaud_rate = {value}\n", encoding="utf-8")

    config = load_config(config_path)

    assert config.printer.baud_rate == constants.DEFAULT_BAUD_RATE


def test_printer_config_is_immutable() -> None:
    config = PrinterConfig(port_path="/dev/ttyUSB0")

    with pytest.raises(AttributeError):
        config.baud_rate = 115200  # type: ignore[misc]
