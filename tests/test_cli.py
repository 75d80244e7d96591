"""Tests for the escpos-buffer command-line interface."""

import io
from pathlib import Path

import pytest

from escpos_buffer import cli


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "escpos-buffer.cfg"
    path.write_text("[printer]\nport_path = /dev/ttyCONF\n", encoding="utf-8")
    return path


def test_print_lines_from_arguments(config_path, transport_factory):
    exit_code = cli.main(
        ["-c", str(config_path), "print", "hello", "world"],
        transport_factory=transport_factory,
    )

    assert exit_code == 0
    assert len(transport_factory.created) == 1
    transport = transport_factory.last
    assert transport.port_path == "/dev/ttyCONF"
    assert transport.writes == [b"\x1b@hello\nworld\n\x1bd\x02"]
    assert transport.close_calls == 1


def test_print_formatting_options(config_path, transport_factory):
    exit_code = cli.main(
        [
            "-c",
            str(config_path),
            "print",
            "--port",
            "/dev/ttyARG",
            "--baud",
            "38400",
            "--align",
            "center",
            "--size",
            "double_both",
            "--bold",
            "--feed",
            "4",
            "--no-init",
            "TOTAL",
        ],
        transport_factory=transport_factory,
    )

    assert exit_code == 0
    transport = transport_factory.last
    assert (transport.port_path, transport.baud_rate) == ("/dev/ttyARG", 38400)
    assert transport.writes == [
        b"\x1ba\x01\x1b!\x30\x1bETOTAL\n\x1bF\x1b!\x00\x1bd\x04"
    ]


def test_print_reads_stdin_without_arguments(
    config_path, transport_factory, monkeypatch
):
    monkeypatch.setattr("sys.stdin", io.StringIO("first\nsecond\n"))

    exit_code = cli.main(
        ["-c", str(config_path), "print", "--no-init", "--feed", "0"],
        transport_factory=transport_factory,
    )

    assert exit_code == 0
    assert transport_factory.last.writes == [b"first\nsecond\n\x1bd\x00"]


def test_print_failure_returns_error_code(config_path, transport_factory):
    transport_factory.options["open_error"] = OSError("Permission denied")

    exit_code = cli.main(
        ["-c", str(config_path), "print", "hello"],
        transport_factory=transport_factory,
    )

    assert exit_code == 1


def test_invalid_feed_returns_error_code(config_path, transport_factory):
    exit_code = cli.main(
        ["-c", str(config_path), "print", "--feed", "300", "hello"],
        transport_factory=transport_factory,
    )

    assert exit_code == 1
    assert all(transport.writes == [] for transport in transport_factory.created)


def test_show_config(config_path, capsys):
    exit_code = cli.main(["-c", str(config_path), "show-config"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "[printer]" in out
    assert "port_path = /dev/ttyCONF" in out
    assert "[logging]" in out
