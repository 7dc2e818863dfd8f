from doorknocking_tracker.config import (
    BUNDLED_PROPERTIES_CSV,
    Settings,
    get_settings,
    reset_settings_cache,
)


def test_defaults(monkeypatch):
    monkeypatch.delenv("DKT_STATE_DB", raising=False)
    monkeypatch.delenv("DKT_EXPORT_DIR", raising=False)
    settings = Settings.from_env()
    assert settings.state_db == "./doorknocking.sqlite"
    assert settings.properties_csv == str(BUNDLED_PROPERTIES_CSV)
    assert settings.strict_csv is True
    assert settings.numeric_default == 0
    assert settings.geocoder == "demo"
    assert settings.identity == "demo"
    assert settings.log_level == "INFO"
    assert settings.log_json is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DKT_STRICT_CSV", "off")
    monkeypatch.setenv("DKT_NUMERIC_DEFAULT", "-1")
    monkeypatch.setenv("DKT_GEOCODER", "Nominatim")
    monkeypatch.setenv("DKT_LOG_JSON", "yes")
    monkeypatch.setenv("DKT_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.strict_csv is False
    assert settings.numeric_default == -1
    assert settings.geocoder == "nominatim"
    assert settings.log_json is True
    assert settings.log_level == "DEBUG"


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("DKT_STRICT_CSV", "maybe")
    monkeypatch.setenv("DKT_NUMERIC_DEFAULT", "zero")
    settings = Settings.from_env()
    assert settings.strict_csv is True
    assert settings.numeric_default == 0


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("DKT_EXPORT_DIR", "/tmp/elsewhere")
    assert get_settings() is first
    reset_settings_cache()
    assert get_settings().export_dir == "/tmp/elsewhere"
