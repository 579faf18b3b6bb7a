"""Configuration file tests."""

from pathlib import Path

import pytest

from rentpilot_backend.config import Settings

CONFIG_DIR = Path(__file__).resolve().parent.parent / "resources" / "config"


@pytest.mark.parametrize(
    "name, url_prefix",
    [
        ("test.yaml", "sqlite+aiosqlite://"),
        ("local.yaml", "mysql+asyncmy://"),
    ],
)
def test_shipped_configs_load(name, url_prefix):
    config = Settings.from_yaml(str(CONFIG_DIR / name))
    assert config.database_url.startswith(url_prefix)


def test_in_memory_url_keeps_trailing_colon():
    config = Settings.from_yaml(str(CONFIG_DIR / "test.yaml"))
    assert config.database_url == "sqlite+aiosqlite:///:memory:"
    assert config.property_photo_bucket == "property-photos"
