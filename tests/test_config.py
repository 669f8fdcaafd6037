import pytest

from formlayer.config import DEFAULT_RENDER_SCALE, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("FORMLAYER_PROFILE", "FORMLAYER_RENDER_SCALE", "FORMLAYER_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = load_settings()
    assert settings.profile_path is None
    assert settings.render_scale == DEFAULT_RENDER_SCALE
    assert settings.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("FORMLAYER_PROFILE", "/tmp/profile.json")
    monkeypatch.setenv("FORMLAYER_RENDER_SCALE", " 2 ")
    monkeypatch.setenv("FORMLAYER_LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.profile_path == "/tmp/profile.json"
    assert settings.render_scale == 2.0
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("FORMLAYER_RENDER_SCALE", "  ")
    assert load_settings().render_scale == DEFAULT_RENDER_SCALE


@pytest.mark.parametrize("value", ["fast", "0", "-1"])
def test_invalid_render_scale(monkeypatch, value):
    monkeypatch.setenv("FORMLAYER_RENDER_SCALE", value)
    with pytest.raises(ValueError):
        load_settings()
