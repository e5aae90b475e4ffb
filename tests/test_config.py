import json

import pytest

from kig_issues.core.config import Settings, StorageMode, resolve_storage_mode, validate_storage_config


@pytest.fixture
def configured(tmp_path):
    key_file = tmp_path / "service-account.json"
    key_file.write_text(json.dumps({"type": "service_account", "project_id": "kig-prod"}))

    cfg = Settings()
    cfg.STORAGE_CONFIGURED = True
    cfg.FIREBASE_PROJECT_ID = "kig-prod"
    cfg.FIREBASE_SERVICE_ACCOUNT_PATH = str(key_file)
    cfg.JWT_SECRET = "a-real-signing-secret"
    return cfg


def test_complete_config_is_live(configured):
    assert validate_storage_config(configured) is True
    assert resolve_storage_mode(configured) is StorageMode.LIVE


def test_switch_off_means_mock(configured):
    configured.STORAGE_CONFIGURED = False
    assert resolve_storage_mode(configured) is StorageMode.MOCK


@pytest.mark.parametrize("project_id", ["", "undefined", "your-project-id"])
def test_placeholder_project_id_means_mock(configured, project_id):
    configured.FIREBASE_PROJECT_ID = project_id
    assert validate_storage_config(configured) is False


@pytest.mark.parametrize("secret", ["", "fallback-secret-key", "your-secret-key-here"])
def test_placeholder_secret_means_mock(configured, secret):
    configured.JWT_SECRET = secret
    assert validate_storage_config(configured) is False


def test_missing_service_account_means_mock(configured, tmp_path):
    configured.FIREBASE_SERVICE_ACCOUNT_PATH = str(tmp_path / "missing.json")
    assert validate_storage_config(configured) is False


def test_service_account_must_be_a_key_file(configured, tmp_path):
    bogus = tmp_path / "bogus.json"
    bogus.write_text(json.dumps({"type": "authorized_user"}))
    configured.FIREBASE_SERVICE_ACCOUNT_PATH = str(bogus)
    assert validate_storage_config(configured) is False

    bogus.write_text("{not json")
    assert validate_storage_config(configured) is False
