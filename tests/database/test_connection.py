import pytest

from src.qr_attendance.qr_attendance.database.connection import DatabaseConnection, DBConfig

DB_CONFIG = {"host": "localhost", "port": "3307", "user": "qr", "password": "secret", "database": "qr_attendance"}


def test_db_config_from_settings_mapping():
    config = DBConfig.from_mapping(DB_CONFIG, timeout_seconds=7)

    assert config.port == 3307
    assert config.database == "qr_attendance"
    assert config.timeout_seconds == 7


def test_db_config_reports_missing_keys():
    with pytest.raises(ValueError, match="password, database"):
        DBConfig.from_mapping({"host": "localhost", "user": "qr"})


def test_shared_factory_follows_config_changes(monkeypatch):
    monkeypatch.setattr(DatabaseConnection, "_instance", None)
    first = DatabaseConnection.get_instance(DBConfig.from_mapping(DB_CONFIG))

    assert DatabaseConnection.get_instance(DBConfig.from_mapping(DB_CONFIG)) is first
    other = DatabaseConnection.get_instance(DBConfig.from_mapping({**DB_CONFIG, "database": "qr_test"}))
    assert other is not first
    assert other.config.database == "qr_test"
