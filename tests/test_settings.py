import importlib

from config import get_settings_module
from src.smart_attendance.smart_attendance.core.constants import DEFAULT_FACE_MATCH_THRESHOLD
from src.smart_attendance.smart_attendance.geo.fence import Coordinate
from src.smart_attendance.smart_attendance.settings import AppSettings


def test_settings_module_selection(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_settings_module() == "config.production"
    monkeypatch.setenv("APP_ENV", "TEST")
    assert get_settings_module() == "config.testing"
    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "config.development"


def test_app_settings_from_testing_module():
    settings = AppSettings.from_module(importlib.import_module("config.testing"))

    assert settings.jwt_secret == "test-jwt-secret"
    assert settings.campus.center == Coordinate(17.409954, 78.603195)
    assert settings.campus.radius_km == 2.0
    assert settings.face_match_threshold == DEFAULT_FACE_MATCH_THRESHOLD
    assert "Sarah" in settings.student_roster


def test_jwt_secret_falls_back_to_secret_key():
    class Module:
        SECRET_KEY = "only-secret"

    settings = AppSettings.from_module(Module)
    assert settings.jwt_secret == "only-secret"
    assert settings.token_expiry_hours == 24
    assert settings.student_roster == ()
