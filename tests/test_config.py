import pytest

from word2pdf.config import Settings, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.port == 8080
    assert settings.libreoffice_bin == "libreoffice"
    assert settings.convert_timeout_sec is None


def test_empty_port_uses_default():
    assert load_settings({"PORT": ""}).port == 8080


def test_overrides():
    settings = load_settings(
        {
            "PORT": "9000",
            "HOST": "127.0.0.1",
            "RELOAD": "yes",
            "LIBREOFFICE_BIN": "/opt/libreoffice/program/soffice",
            "CONVERT_TIMEOUT_SEC": "90",
            "MAX_UPLOAD_MB": "25",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.port == 9000
    assert settings.host == "127.0.0.1"
    assert settings.reload is True
    assert settings.libreoffice_bin == "/opt/libreoffice/program/soffice"
    assert settings.convert_timeout_sec == 90.0
    assert settings.max_upload_mb == 25
    assert settings.log_level == "DEBUG"


def test_read_from_process_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8181")
    settings = load_settings()
    monkeypatch.setenv("PORT", "9999")
    assert settings.port == 8181


def test_invalid_port_is_rejected():
    with pytest.raises(ValueError):
        load_settings({"PORT": "eighty"})
