from __future__ import annotations

import os
import subprocess

import pytest

from shadowenv.common.errors import EnvironmentWriteError, NotFound
from shadowenv.config.settings import Settings
from shadowenv.services import shadow
from shadowenv.services.shadow import ShadowEnvironment


def _no_toolchain(argv):  # noqa: ANN001
    raise FileNotFoundError(argv[0])


def _env(os_env: dict[str, str] | None = None, **kwargs) -> ShadowEnvironment:  # noqa: ANN003
    kwargs.setdefault("run_command", _no_toolchain)
    kwargs.setdefault("test_probe", lambda: False)
    env = ShadowEnvironment(os_env={} if os_env is None else os_env, autoload=False, **kwargs)
    env.reload()
    return env


def test_set_then_get():
    env = _env()
    env.set("FOO", "bar")
    assert env.get("FOO", "nope") == "bar"
    env.set("FOO", "")
    assert env.get("FOO", "nope") == ""


def test_missing_returns_fallback_and_must_get_fails():
    env = _env({"HOME": "/root"})
    assert env.get("MISSING", "fallback") == "fallback"
    assert env.get("MISSING") == ""
    with pytest.raises(NotFound) as ei:
        env.must_get("MISSING")
    assert ei.value.name == "MISSING"
    assert isinstance(ei.value, LookupError)
    assert env.must_get("HOME") == "/root"


def test_names_are_case_sensitive():
    env = _env()
    env.set("path", "lower")
    assert env.get("PATH", "unset") == "unset"


def test_set_does_not_touch_os_env():
    os_env = {"A": "1"}
    env = _env(os_env)
    env.set("A", "2")
    env.set("B", "3")
    assert os_env == {"A": "1"}
    assert env.get("A") == "2"


def test_must_set_updates_shadow_and_os():
    os_env: dict[str, str] = {}
    env = _env(os_env)
    env.must_set("PORT", "8080")
    assert env.get("PORT") == "8080"
    assert os_env["PORT"] == "8080"


def test_must_set_real_environment(monkeypatch):
    monkeypatch.setenv("SHADOWENV_MUST_SET_PROBE", "placeholder")
    env = ShadowEnvironment(autoload=False, run_command=_no_toolchain, test_probe=lambda: False)
    env.must_set("SHADOWENV_MUST_SET_PROBE", "value")
    assert os.environ["SHADOWENV_MUST_SET_PROBE"] == "value"
    assert env.must_get("SHADOWENV_MUST_SET_PROBE") == "value"


def test_must_set_rejected_leaves_shadow_unchanged():
    env = ShadowEnvironment(autoload=False, run_command=_no_toolchain, test_probe=lambda: False)
    with pytest.raises(EnvironmentWriteError) as ei:
        env.must_set("BAD=NAME", "x")
    assert ei.value.name == "BAD=NAME"
    assert isinstance(ei.value.__cause__, ValueError)
    assert "BAD=NAME" not in env.map()
    assert "BAD=NAME" not in os.environ


def test_map_returns_copy():
    env = _env({"A": "1"})
    snapshot = env.map()
    snapshot["A"] = "changed"
    snapshot["NEW"] = "x"
    assert env.get("A") == "1"
    assert env.get("NEW", "absent") == "absent"


def test_environ_lists_name_value_pairs():
    env = _env({"A": "1", "B": "x=y"})
    env.set("C", "")
    assert sorted(env.environ()) == ["A=1", "B=x=y", "C="]


def test_reload_drops_stale_entries():
    os_env = {"KEEP": "1"}
    env = _env(os_env)
    env.set("STALE", "x")
    os_env["EXTERNAL"] = "y"
    env.reload()
    assert env.get("STALE", "gone") == "gone"
    assert env.get("EXTERNAL") == "y"
    assert env.get("KEEP") == "1"


def test_reload_sets_test_mode_in_shadow_only():
    os_env: dict[str, str] = {}
    env = _env(os_env, test_probe=lambda: True)
    assert env.get("GO_ENV") == "test"
    assert "GO_ENV" not in os_env


def test_reload_keeps_existing_mode():
    env = _env({"GO_ENV": "production"}, test_probe=lambda: True)
    assert env.get("GO_ENV") == "production"


def test_reload_without_harness_leaves_mode_unset():
    env = _env()
    assert env.get("GO_ENV", "unset") == "unset"


def test_reload_seeds_toolchain_path():
    calls = []

    def fake_run(argv):  # noqa: ANN001
        calls.append(argv)
        return "/home/dev/go\n"

    os_env: dict[str, str] = {}
    env = _env(os_env, run_command=fake_run)
    assert calls and calls[0] == ["go", "env", "GOPATH"]
    assert os_env["GOPATH"] == "/home/dev/go"
    assert env.go_path() == "/home/dev/go"


def test_reload_ignores_toolchain_failure():
    def failing_run(argv):  # noqa: ANN001
        raise subprocess.CalledProcessError(1, argv)

    os_env = {"A": "1"}
    env = _env(os_env, run_command=failing_run)
    assert "GOPATH" not in os_env
    assert env.go_path() == ""
    assert env.get("A") == "1"


def test_reload_skips_toolchain_when_path_is_set():
    calls = []

    def fake_run(argv):  # noqa: ANN001
        calls.append(argv)
        return "/other"

    env = _env({"GOPATH": "/mine"}, run_command=fake_run)
    assert calls == []
    assert env.go_path() == "/mine"


def test_toolchain_binary_is_configurable():
    calls = []

    def fake_run(argv):  # noqa: ANN001
        calls.append(argv)
        return ""

    settings = Settings().model_copy(update={"toolchain_bin": "go1.22"})
    os_env: dict[str, str] = {}
    _env(os_env, run_command=fake_run, settings=settings)
    assert calls[0][0] == "go1.22"
    # respuesta vacía: no se escribe nada
    assert "GOPATH" not in os_env


def test_go_bin_default_and_override():
    env = _env()
    assert env.go_bin() == "go"
    env.set("GO_BIN", "/usr/local/go/bin/go")
    assert env.go_bin() == "/usr/local/go/bin/go"


def test_process_wide_instance():
    assert shadow.default() is shadow.default_env
    if not os.environ.get("GO_ENV"):
        assert shadow.get("GO_ENV") == "test"

    def body() -> None:
        shadow.set("SHADOWENV_FACADE_PROBE", "inside")
        assert shadow.must_get("SHADOWENV_FACADE_PROBE") == "inside"
        assert "SHADOWENV_FACADE_PROBE=inside" in shadow.environ()

    shadow.temp(body)
    assert shadow.get("SHADOWENV_FACADE_PROBE", "gone") == "gone"
    assert "SHADOWENV_FACADE_PROBE" not in shadow.map()
