"""Tests for _keys.py — key-name translation, collisions and readers."""

import pytest

from powerconf._keys import (
    ArgumentReader,
    EnvironmentReader,
    KeyFormat,
    arg_name,
    collisions,
    env_name,
    external_name,
    get_args,
    get_env,
)
from powerconf._repository import FakeConfigRepository
from powerconf._testing import override_env
from powerconf._types import KeyCollisionError


class TestExternalName:
    def test_camel_case(self):
        assert arg_name("myApp") == "my-app"
        assert env_name("myApp") == "MY_APP"

    def test_non_ascii_and_punctuation(self):
        assert arg_name("HTML$Valües") == "html-val-es"
        assert env_name("HTML$Valües") == "HTML_VAL_ES"

    @pytest.mark.parametrize(
        "key, arg, env",
        [
            ("port", "port", "PORT"),
            ("max_retries", "max-retries", "MAX_RETRIES"),
            ("server.port", "server-port", "SERVER_PORT"),
            ("page2Size", "page2-size", "PAGE2_SIZE"),
            ("URL", "url", "URL"),
            ("htmlURLPath", "html-urlpath", "HTML_URLPATH"),
            ("--weird--key--", "weird-key", "WEIRD_KEY"),
            ("a..b", "a-b", "A_B"),
        ],
    )
    def test_examples(self, key, arg, env):
        assert arg_name(key) == arg
        assert env_name(key) == env

    def test_prefix_prepended_verbatim(self):
        assert env_name("myApp", "APP_") == "APP_MY_APP"
        assert env_name("myApp", "APP") == "APPMY_APP"
        assert arg_name("myApp", "x-") == "x-my-app"

    def test_deterministic(self):
        assert external_name("myApp", KeyFormat.ENV, "P_") == external_name("myApp", KeyFormat.ENV, "P_")

    def test_format_attributes(self):
        assert KeyFormat.ARG.separator == "-"
        assert KeyFormat.ENV.separator == "_"


class TestCollisions:
    def test_reports_both_keys(self):
        assert collisions(["myApp", "my_app", "other"], KeyFormat.ARG) == ["myApp", "my_app"]

    def test_none(self):
        assert collisions(["a", "b"], KeyFormat.ENV) == []

    def test_repeated_key_is_not_a_collision(self):
        assert collisions(["a", "a"], KeyFormat.ENV) == []

    def test_argument_reader_rejects(self):
        with pytest.raises(KeyCollisionError) as exc_info:
            ArgumentReader(["myApp", "my.app"])
        assert exc_info.value.keys == ["my.app", "myApp"]
        assert exc_info.value.target == "arg"

    def test_environment_reader_rejects(self):
        with pytest.raises(KeyCollisionError) as exc_info:
            EnvironmentReader(["my-app", "myApp"], "APP_")
        assert exc_info.value.target == "env"


class TestArgumentReader:
    def test_values_and_unused(self):
        result = ArgumentReader(["myApp", "debug"]).read(
            ["-my-app=1", "-debug", "plain", "-unknown=3", "--my-app=2"]
        )
        assert result.values == {"myApp": "1", "debug": "true"}
        assert result.unused == ["plain", "-unknown=3", "--my-app=2"]

    def test_value_with_equals(self):
        assert ArgumentReader(["url"]).read(["-url=a=b"]).values == {"url": "a=b"}

    def test_empty_value(self):
        assert ArgumentReader(["name"]).read(["-name="]).values == {"name": ""}

    def test_bare_prefix_unused(self):
        assert ArgumentReader(["a"]).read(["-"]).unused == ["-"]

    def test_canonical_key_is_not_an_argument_name(self):
        result = ArgumentReader(["myApp"]).read(["-myApp=1"])
        assert result.values == {}
        assert result.unused == ["-myApp=1"]

    def test_custom_prefix(self):
        result = ArgumentReader(["myApp"], prefix="--").read(["--my-app=1", "-my-app=2"])
        assert result.values == {"myApp": "1"}
        assert result.unused == ["-my-app=2"]

    def test_get_args(self):
        assert get_args(["port"], ["-port=80"]).values == {"port": "80"}


class TestEnvironmentReader:
    def test_read_from_repository(self):
        repo = FakeConfigRepository(env={"APP_MY_APP": "x", "MY_APP": "y", "PATH": "/bin"})
        result = EnvironmentReader(["myApp", "debug"], "APP_").read(repo)
        assert result.values == {"myApp": "x"}
        assert result.unused == []

    def test_read_active_repository(self):
        with override_env({"PORT": "80"}):
            assert EnvironmentReader(["port"]).read().values == {"port": "80"}

    def test_scan_reports_unknown_prefixed(self):
        environ = {"APP_PORT": "80", "APP_PROT": "81", "HOME": "/root"}
        result = EnvironmentReader(["port"], "APP_").scan(environ)
        assert result.values == {"port": "80"}
        assert result.unused == ["APP_PROT"]

    def test_scan_without_prefix_ignores_unknown(self):
        result = EnvironmentReader(["port"]).scan({"PORT": "1", "HOME": "/root"})
        assert result.values == {"port": "1"}
        assert result.unused == []

    def test_get_env(self):
        repo = FakeConfigRepository(env={"X_PORT": "1"})
        assert get_env(["port"], "X_", repo).values == {"port": "1"}
