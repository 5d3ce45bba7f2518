"""Tests for _configurator.py — InstanceConfigurator."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import pytest

from powerconf._configurator import UNKNOWN_KEY, Configurator, InstanceConfigurator
from powerconf._parameter import parameter
from powerconf._types import DuplicateKeyError, IllegalValueError


class Mode(enum.Enum):
    FAST = 1
    SAFE = 2


@dataclass
class ServerConfig:
    """HTTP server settings.

    Used by the web process.
    """

    host: str = "localhost"
    port: int = 8080
    debug: bool = False
    mode: Mode = Mode.SAFE
    workers: int = field(default=2, metadata={"description": "Worker processes"})


class RecordingVisitor:
    def __init__(self, fail_on: str | None = None) -> None:
        self.configurations = []
        self.visited = []
        self.fail_on = fail_on

    def visit_configuration(self, configurator):
        self.configurations.append(configurator.name)

    def visit_parameter(self, configurator, parameter, value):
        self.visited.append((parameter.key, value))
        if parameter.key == self.fail_on:
            raise RuntimeError(f"visitor failed on {parameter.key}")


@pytest.fixture
def cfg():
    return ServerConfig()


@pytest.fixture
def conf(cfg):
    return InstanceConfigurator.control(cfg)


class TestControl:
    def test_default_name_and_description(self, conf):
        assert conf.name == "ServerConfig"
        assert conf.description == "HTTP server settings."

    def test_explicit_name(self, cfg):
        conf = InstanceConfigurator.control(cfg, name="server", description="")
        assert conf.name == "server"
        assert conf.description == ""

    def test_explicit_params(self, cfg):
        conf = InstanceConfigurator.control(cfg, params=[parameter(cfg, "port")])
        assert conf.keys() == ["port"]

    def test_key_prefix(self, cfg):
        conf = InstanceConfigurator.control(cfg, key_prefix="srv.")
        assert conf.keys() == ["srv.debug", "srv.host", "srv.mode", "srv.port", "srv.workers"]

    def test_duplicate_keys_rejected(self, cfg):
        params = [parameter(cfg, "port"), parameter(cfg, "workers", key="port")]
        with pytest.raises(DuplicateKeyError, match="port"):
            InstanceConfigurator.control(cfg, params=params)

    def test_satisfies_protocol(self, conf):
        assert isinstance(conf, Configurator)

    def test_configuration(self, cfg, conf):
        assert conf.configuration is cfg


class TestLookup:
    def test_keys_sorted(self, conf):
        assert conf.keys() == ["debug", "host", "mode", "port", "workers"]

    def test_keys_defensive_copy(self, conf):
        conf.keys().append("injected")
        assert "injected" not in conf.keys()

    def test_has_key(self, conf):
        assert conf.has_key("debug")
        assert conf.has_key("workers")
        assert not conf.has_key("missing")

    def test_parameter(self, conf):
        assert conf.parameter("port").key == "port"
        assert conf.parameter("missing") is None

    def test_value(self, conf):
        assert conf.value("port") == "8080"
        assert conf.value("mode") == "SAFE"
        assert conf.value("missing") is None


class TestSet:
    def test_applied(self, cfg, conf):
        assert conf.set("port", "9000") == 1
        assert cfg.port == 9000

    def test_unknown_key(self, conf):
        assert conf.set("missing", "1") == 0

    def test_illegal_value_propagates(self, conf):
        with pytest.raises(IllegalValueError):
            conf.set("port", "many")


class TestUpdate:
    def test_partial_failure(self, cfg, conf):
        errors = conf.update(
            {
                "host": "0.0.0.0",
                "port": "9000",
                "debug": "on",
                "workers": "lots",
                "missing": "1",
            }
        )
        assert set(errors) == {"workers", "missing"}
        assert errors["missing"] == UNKNOWN_KEY
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 9000
        assert cfg.debug is True
        assert cfg.workers == 2

    def test_failure_does_not_stop_later_pairs(self, cfg, conf):
        errors = conf.update({"port": "bad", "workers": "4"})
        assert list(errors) == ["port"]
        assert cfg.workers == 4

    def test_empty_map_on_success(self, conf):
        assert conf.update({"port": "1"}) == {}

    def test_non_strict_ignores_unknown(self, conf):
        assert conf.update({"missing": "1"}, strict=False) == {}


class TestWalk:
    def test_visits_in_key_order(self, conf):
        visitor = RecordingVisitor()
        conf.walk(visitor)
        assert visitor.configurations == ["ServerConfig"]
        assert [key for key, _ in visitor.visited] == ["debug", "host", "mode", "port", "workers"]
        assert ("port", "8080") in visitor.visited

    def test_visitor_exception_propagates(self, conf):
        visitor = RecordingVisitor(fail_on="host")
        with pytest.raises(RuntimeError, match="host"):
            conf.walk(visitor)
        assert [key for key, _ in visitor.visited] == ["debug", "host"]

    def test_walk_again_after_failure(self, conf):
        with pytest.raises(RuntimeError):
            conf.walk(RecordingVisitor(fail_on="debug"))
        visitor = RecordingVisitor()
        conf.walk(visitor)
        assert len(visitor.visited) == 5
