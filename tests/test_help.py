"""Tests for _help.py and the help functions of _manager.py."""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass, field

import pytest

from powerconf._manager import configure, help_text, print_help


class Mode(enum.Enum):
    FAST = "fast"
    SAFE = "safe"

    @property
    def description(self):
        return "skip checks" if self is Mode.FAST else None


@dataclass
class ServerConfig:
    """HTTP server settings."""

    maxConnections: int = field(default=10, metadata={"description": "Connection limit"})
    mode: Mode = Mode.SAFE


@dataclass
class Other:
    zone: str = "eu"


class TestHelpText:
    def test_lists_parameters(self):
        cfg = ServerConfig()
        conf = configure(cfg)
        cfg.maxConnections = 20
        text = help_text(conf, "APP_")
        assert "ServerConfig: HTTP server settings." in text
        line = next(l for l in text.splitlines() if "maxConnections" in l)
        assert "APP_MAX_CONNECTIONS" in line
        assert "-max-connections" in line
        assert "'20'" in line
        assert "default '10'" in line
        assert "Connection limit" in line

    def test_options(self):
        text = help_text(configure(ServerConfig()))
        assert "      FAST: skip checks" in text
        assert "      SAFE\n" in text

    def test_key_order(self):
        text = help_text(configure(ServerConfig()))
        assert text.index("maxConnections") < text.index("  mode")

    def test_trailing_newline(self):
        assert help_text(configure(ServerConfig())).endswith("\n\n")

    def test_grouped_by_configuration(self):
        text = help_text(configure(ServerConfig(), Other()))
        assert text.index("ServerConfig") < text.index("Other") < text.index("zone")


class TestPrintHelp:
    def test_writes_to_stream(self):
        out = io.StringIO()
        print_help(configure(Other()), out=out)
        assert "ZONE" in out.getvalue()

    def test_defaults_to_stderr(self, capsys):
        print_help(configure(Other()))
        assert "zone" in capsys.readouterr().err
