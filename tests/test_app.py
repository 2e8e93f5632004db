from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from config import Settings, parse_lifetime
from main import create_app


@pytest.mark.unit
class TestConfig:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("3600000", timedelta(hours=1)),
            ("500ms", timedelta(milliseconds=500)),
            ("90s", timedelta(seconds=90)),
            ("15m", timedelta(minutes=15)),
            ("1h", timedelta(hours=1)),
            ("7d", timedelta(days=7)),
            ("2 days", timedelta(days=2)),
            ("1y", timedelta(days=365, hours=6)),
            ("1.5H", timedelta(minutes=90)),
            (3600, timedelta(hours=1)),
        ],
    )
    def test_parse_lifetime(self, raw, expected):
        assert parse_lifetime(raw) == expected

    @pytest.mark.parametrize("raw", ["", "soon", "10 fortnights", "-5m"])
    def test_parse_lifetime_rejects_garbage(self, raw):
        with pytest.raises(ValueError):
            parse_lifetime(raw)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://db.internal:27017")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("JWT_SECRET", "s3")
        monkeypatch.setenv("EXPIRES_IN", "7d")

        settings = Settings.from_env()

        assert settings.mongodb_uri == "mongodb://db.internal:27017"
        assert settings.port == 8080
        assert settings.jwt_secret == "s3"
        assert settings.token_lifetime == timedelta(days=7)

    def test_defaults(self, monkeypatch):
        for name in ("MONGODB_URI", "DATABASE_URL", "DATABASE_NAME", "PORT", "EXPIRES_IN"):
            monkeypatch.delenv(name, raising=False)

        with patch("config.load_dotenv"):
            settings = Settings.from_env()

        assert settings.port == 5000
        assert settings.database_name == "styleSync"
        assert settings.token_lifetime == timedelta(hours=1)


@pytest.mark.integration
class TestAppWiring:
    def test_health(self, client):
        response = client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Server is running smoothly"
        assert body["timestamp"]

    def test_database_report(self, client):
        client.post("/api/v1/products", json={"title": "Cap", "price": 10})

        body = client.get("/test").json()

        assert body["database"] == "Connected"
        assert body["database_name"] == "styleSyncTest"
        assert "products" in body["collections"]

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_startup_fails_when_store_unreachable(self, settings):
        app = create_app(settings)

        with patch("database.connect", side_effect=ServerSelectionTimeoutError("no server")):
            with pytest.raises(ServerSelectionTimeoutError):
                with TestClient(app):
                    pass
