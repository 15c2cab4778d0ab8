import pytest

VALID_SETTINGS_DATA = {
    "ENVIRONMENT": "production",
    "FASTAPI_API_KEY_HEADER": "test_key_header",
    "FASTAPI_API_KEY": "test_key",
    "FASTAPI_CORS_ORIGINS": ["http://localhost"],
    "POSTGRES_USER": "postgres",
    "POSTGRES_PASSWORD": "postgres",
    "POSTGRES_HOST": "localhost",
    "POSTGRES_PORT": 5432,
    "POSTGRES_DB": "postgres",
}
HEADERS = {
    VALID_SETTINGS_DATA["FASTAPI_API_KEY_HEADER"]: VALID_SETTINGS_DATA[
        "FASTAPI_API_KEY"
    ]
}


@pytest.fixture(scope="function", autouse=True)
def mock_get_settings(monkeypatch):
    """
    Mock the get_settings function to return a test configuration.
    """
    from src.fleet_manager.config import Settings, get_settings

    def _get_settings():
        return Settings(**VALID_SETTINGS_DATA)

    get_settings.cache_clear()
    monkeypatch.setattr("src.fleet_manager.middleware.auth.get_settings", _get_settings)
    monkeypatch.setattr("src.fleet_manager.config.get_settings", _get_settings)
