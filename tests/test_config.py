"""Environment selection and production safeguards."""
import pytest
from pydantic import ValidationError

from contapyme.api import main as main_module
from contapyme.core import config


@pytest.fixture
def load_settings(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://db.example/contapyme")
    config.get_settings.cache_clear()
    yield config.get_settings
    config.get_settings.cache_clear()


@pytest.mark.parametrize("variable", ["ENV", "APP_ENV"])
@pytest.mark.parametrize("value", ["prod", "production", "PRODUCTION"])
def test_production_refuses_default_secret(load_settings, monkeypatch, variable, value):
    monkeypatch.setenv(variable, value)
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        load_settings()


@pytest.mark.parametrize("variable", ["ENV", "APP_ENV"])
def test_production_alias_is_production(load_settings, monkeypatch, variable):
    monkeypatch.setenv(variable, "production")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret-value")

    loaded = load_settings()

    assert isinstance(loaded, config.ProdSettings)
    assert loaded.is_production
    assert loaded.LOG_FORMAT == "json"


def test_prod_settings_stay_production_whatever_env_says(load_settings, monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("ENV", "staging")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret-value")
    assert load_settings().is_production


def test_dev_settings_accept_placeholder_secret(load_settings, monkeypatch):
    monkeypatch.setenv("ENV", "development")
    loaded = load_settings()
    assert isinstance(loaded, config.DevSettings)
    assert not loaded.is_production
    assert loaded.JWT_SECRET == "change_me"


def test_production_app_hides_interactive_docs(load_settings, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret-value")
    monkeypatch.setattr(main_module, "settings", load_settings())

    app = main_module.create_app()

    assert app.docs_url is None
    assert app.openapi_url is None
