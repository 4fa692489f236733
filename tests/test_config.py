import json
import logging
import os

from config import Settings
from logger import LogManager


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("INSIGHT_TIMEOUT_SECONDS", raising=False)
    settings = Settings(_env_file=None)

    assert settings.insight_timeout_seconds == 8.0
    assert settings.insight_cache_ttl_seconds == 600
    assert settings.insight_cache_max_entries == 50
    assert settings.batch_max_size == 10
    assert os.path.isabs(settings.report_output_dir)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GITHUB_REPO_URLS", "https://github.com/a/b, c/d ,")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")
    monkeypatch.setenv("INSIGHT_TIMEOUT_SECONDS", "2.5")
    settings = Settings(_env_file=None)

    assert settings.repository_urls == ["https://github.com/a/b", "c/d"]
    assert settings.openai_api_key.get_secret_value() == "sk-secret"
    assert "sk-secret" not in repr(settings)
    assert settings.insight_timeout_seconds == 2.5


def test_log_manager_writes_json_records(tmp_path):
    logger = LogManager("repovibe-test", log_dir=str(tmp_path), level=logging.DEBUG).logger

    logger.info({"message": "Repository analyzed", "repository": "octo/app"})
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "repovibe-test.jsonl").read_text().splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "Repository analyzed"
    assert record["repository"] == "octo/app"
    assert record["level"] == "INFO"
    assert record["logger"] == "repovibe-test"
