"""settings.yaml 読み込みと Discord 通知のテスト。"""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from gdstats import discord_notify
from gdstats.classification import SortingCode
from gdstats.config import DEFAULT_SERVER_URL, load_settings

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.mark.light
def test_load_settings_bundled_file():
    settings = load_settings(str(PROJECT_ROOT / "settings.yaml"))
    assert settings.output_dir == "Statistics"
    assert settings.default_sorting is SortingCode.DEFAULT
    assert settings.top_demons_limit == 50
    assert settings.server.featured_type == 6
    assert settings.server.epic_type == 16


@pytest.mark.light
def test_load_settings_defaults_for_missing_keys(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("default_sorting: descending_likes\n", encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.output_dir == "Statistics"
    assert settings.default_sorting is SortingCode.DESCENDING_LIKES
    assert settings.server.url == DEFAULT_SERVER_URL
    assert settings.server.max_pages == 500


@pytest.mark.light
def test_load_settings_rejects_unknown_sorting(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("default_sorting: shortest\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_settings(str(path))


@pytest.mark.light
def test_send_discord_skips_without_webhook(monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("must not post")

    monkeypatch.setattr(discord_notify.requests, "post", unexpected)
    discord_notify.send_discord("", "hello")


@pytest.mark.light
def test_send_discord_swallows_request_errors(monkeypatch, caplog):
    def failing_post(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(discord_notify.requests, "post", failing_post)
    discord_notify.send_discord("http://example.invalid/webhook", "hello")
    assert "Discord" in caplog.text


@pytest.mark.light
def test_send_discord_truncates_long_messages(monkeypatch):
    sent = {}

    class _Response:
        def raise_for_status(self):
            return None

    def fake_post(url, json, timeout):
        sent.update(json)
        return _Response()

    monkeypatch.setattr(discord_notify.requests, "post", fake_post)
    discord_notify.send_discord("http://example.invalid/webhook", "x" * 5000)
    assert len(sent["content"]) == discord_notify.MAX_CONTENT_LENGTH
