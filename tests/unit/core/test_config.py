import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from cmsbase.core.config import Settings, get_settings


def test_settings_defaults():
    """Defaults describe a local development server."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.app_name == "cmsbase"
    assert settings.environment == "development"
    assert settings.is_development is True
    assert settings.port == 3000
    assert settings.collections_module == "cmsbase.collections"
    assert settings.redaction_name_field == "Name"
    assert settings.redaction_image_field == "Multi Image Array"
    assert settings.session_id_length == 40
    assert settings.user_id_length == 32


def test_settings_env_override():
    """Environment variables with the CMSBASE_ prefix override defaults."""
    with patch.dict(os.environ, {
        "CMSBASE_ENVIRONMENT": "production",
        "CMSBASE_PORT": "9000",
        "CMSBASE_IMAGE_ARRAY_DIR": "/srv/media/images",
        "CMSBASE_SIGNUP_USERNAME": "Editor",
    }):
        settings = Settings(_env_file=None)

    assert settings.environment == "production"
    assert settings.is_development is False
    assert settings.port == 9000
    assert settings.image_array_dir == "/srv/media/images"
    assert settings.signup_username == "Editor"


def test_cors_origins_from_json_list():
    with patch.dict(os.environ, {"CMSBASE_CORS_ORIGINS": '["http://a.test", "http://b.test"]'}):
        settings = Settings(_env_file=None)

    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_cors_origins_from_comma_separated_argument():
    settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_invalid_environment_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="staging")
