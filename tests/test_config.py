from __future__ import annotations

from contactbook.config import Settings
from contactbook.secret import generate_secret_key


def test_defaults_without_environment():
    settings = Settings.from_env({})
    assert settings.jwt_secret is None
    assert settings.http_port == 8080
    assert settings.token_ttl_hours == 24
    assert settings.cookie_max_age == 86400
    assert settings.cookie_secure is False
    assert settings.auto_migrate is True
    assert settings.database_url.startswith("postgresql://")


def test_empty_secret_counts_as_missing():
    assert Settings.from_env({"JWT_SECRET": ""}).jwt_secret is None


def test_values_are_read_from_environment():
    settings = Settings.from_env(
        {
            "JWT_SECRET": "s3cret",
            "PORT": "9000",
            "HTTP_HOST": "127.0.0.1",
            "COOKIE_SECURE": "true",
            "AUTO_MIGRATE": "0",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.jwt_secret == "s3cret"
    assert settings.http_port == 9000
    assert settings.http_host == "127.0.0.1"
    assert settings.cookie_secure is True
    assert settings.auto_migrate is False
    assert settings.log_level == "DEBUG"


def test_database_url_takes_precedence_over_discrete_variables():
    settings = Settings.from_env({"DATABASE_URL": "postgresql://u:p@db/app", "DB_HOST": "ignored"})
    assert settings.database_url == "postgresql://u:p@db/app"


def test_discrete_database_variables_build_a_descriptor():
    settings = Settings.from_env(
        {
            "DB_HOST": "db",
            "DB_PORT": "6543",
            "DB_USER": "app",
            "DB_PASSWORD": "pw",
            "DB_NAME": "contacts",
        }
    )
    assert settings.database_url == (
        "host=db port=6543 user=app password=pw dbname=contacts sslmode=disable"
    )


def test_generated_secret_is_random_hex():
    first = generate_secret_key()
    assert len(first) == 64
    int(first, 16)
    assert first != generate_secret_key()
