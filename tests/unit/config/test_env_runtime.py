import pytest

from railwatch.config import ConfigurationError, runtime


def test_defaults_come_from_env_file(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("RAILWATCH_API_URL=https://example.test/graphql\nSHARED=first\n")
    monkeypatch.setenv(runtime.ENV_FILE_VARIABLE, str(env_file))

    assert runtime.env_str("RAILWATCH_API_URL") == "https://example.test/graphql"
    # Cached until reset
    env_file.write_text("SHARED=second\n")
    assert runtime.env_str("SHARED") == "first"
    runtime.reset_default_values()
    assert runtime.env_str("SHARED") == "second"


def test_environment_wins_over_file(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("NAME=from_file\n")
    monkeypatch.setenv(runtime.ENV_FILE_VARIABLE, str(env_file))
    monkeypatch.setenv("NAME", " from_env ")

    assert runtime.env_str("NAME") == "from_env"


def test_env_str_blank_and_required(monkeypatch):
    monkeypatch.setenv("BLANK", "  ")

    assert runtime.env_str("BLANK", or_value="fallback") == "fallback"
    assert runtime.env_str("BLANK", allow_blank=True) == ""
    with pytest.raises(ConfigurationError, match="MISSING is missing or empty"):
        runtime.env_str("MISSING", required=True)


def test_env_int_and_float(monkeypatch):
    monkeypatch.setenv("INT_VALUE", "7")
    monkeypatch.setenv("FLOAT_VALUE", "2.5")
    monkeypatch.setenv("BAD", "abc")

    assert runtime.env_int("INT_VALUE") == 7
    assert runtime.env_int("ABSENT", or_value=3) == 3
    assert runtime.env_float("FLOAT_VALUE") == 2.5
    with pytest.raises(ConfigurationError):
        runtime.env_int("BAD")
    with pytest.raises(ConfigurationError):
        runtime.env_float("BAD")
    with pytest.raises(ConfigurationError):
        runtime.env_int("ABSENT", required=True)


@pytest.mark.parametrize("raw, expected", [("yes", True), ("ON", True), ("0", False), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("FLAG", raw)

    assert runtime.env_bool("FLAG") is expected


def test_env_bool_rejects_garbage(monkeypatch):
    monkeypatch.setenv("FLAG", "maybe")

    with pytest.raises(ConfigurationError):
        runtime.env_bool("FLAG")


def test_env_list(monkeypatch):
    monkeypatch.setenv("SERVICES", "svc-a, svc-b,,svc-a ")

    assert runtime.env_list("SERVICES") == ("svc-a", "svc-b")
    assert runtime.env_list("ABSENT") is None
    assert runtime.env_list("ABSENT", or_value=["x"]) == ("x",)

    monkeypatch.setenv("EMPTY", " , ")
    with pytest.raises(ConfigurationError):
        runtime.env_list("EMPTY", required=True)


def test_env_seconds_must_be_non_negative(monkeypatch):
    monkeypatch.setenv("DELAY", "-1")

    with pytest.raises(ConfigurationError, match="Must be non-negative"):
        runtime.env_seconds("DELAY")
    assert runtime.env_seconds("ABSENT", or_value=30.0) == 30.0
