"""TOML config loading and profile overlay."""

from predoracle.config import get_settings, load_config


def test_profile_overlay(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[oracle]\nauthority = "auth"\nbond_amount = 500\nliveness_period_sec = 7200\n'
        '[storage]\ndb_path = "data/a.duckdb"\n'
    )
    (tmp_path / "dev.toml").write_text("[oracle]\nliveness_period_sec = 60\n")

    raw = load_config("dev", tmp_path)
    assert raw["oracle"] == {"authority": "auth", "bond_amount": 500, "liveness_period_sec": 60}

    settings = get_settings("dev", tmp_path)
    assert settings.authority == "auth"
    assert settings.bond_amount == 500
    assert settings.liveness_period_sec == 60
    assert settings.db_path == "data/a.duckdb"
    assert settings.description_max_bytes == 256
    assert settings.logging_level == "INFO"


def test_missing_config_uses_defaults(tmp_path):
    settings = get_settings(None, tmp_path)
    assert settings.bond_amount == 1_000_000
    assert settings.liveness_period_sec == 7200
    assert settings.authority is None
