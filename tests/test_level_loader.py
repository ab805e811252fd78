"""レベル取得(通信・ページ送り)のテスト。"""

from __future__ import annotations

import pytest
import requests

from gdstats import level_loader, scraper
from gdstats.config import ServerConfig
from gdstats.errors import FetchError


def _server(max_pages: int = 10) -> ServerConfig:
    return ServerConfig(
        url="http://example.invalid/getGJLevels21.php",
        secret="secret",
        game_version=21,
        binary_version=35,
        featured_type=6,
        epic_type=16,
        max_pages=max_pages,
        request_interval_sec=0.5,
        timeout_sec=5,
    )


def _page(ids, total, offset, count=2) -> str:
    levels = "|".join(f"1:{i}:2:L{i}:6:4:9:10:19:1" for i in ids)
    return f"{levels}#4:Robtop:71##{total}:{offset}:{count}#x"


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.mark.light
def test_fetch_levels_reads_until_last_page(monkeypatch):
    pages = {0: _page([1, 2], 5, 0), 1: _page([3, 2], 5, 2), 2: _page([5], 5, 4)}
    requested = []
    sleeps = []

    def fake_fetch(server, level_type, page):
        requested.append((level_type, page))
        return pages[page]

    monkeypatch.setattr(level_loader, "fetch_levels_page", fake_fetch)

    levels = level_loader.fetch_levels(_server(), 6, sleep=sleeps.append)

    assert [lv.id for lv in levels] == [1, 2, 3, 5]
    assert requested == [(6, 0), (6, 1), (6, 2)]
    assert sleeps == [0.5, 0.5]


@pytest.mark.light
def test_fetch_levels_stops_on_no_result_and_max_pages(monkeypatch):
    monkeypatch.setattr(level_loader, "fetch_levels_page", lambda s, t, p: None)
    assert level_loader.fetch_levels(_server(), 16, sleep=lambda _: None) == []

    calls = []

    def endless(server, level_type, page):
        calls.append(page)
        return _page([page * 2 + 1, page * 2 + 2], 10**6, page * 2)

    monkeypatch.setattr(level_loader, "fetch_levels_page", endless)
    levels = level_loader.fetch_levels(_server(max_pages=3), 6, sleep=lambda _: None)
    assert calls == [0, 1, 2]
    assert len(levels) == 6


@pytest.mark.light
def test_fetch_levels_page_posts_form_and_handles_marker(monkeypatch):
    captured = {}

    def fake_post(url, data, headers, timeout):
        captured.update(url=url, data=data, headers=headers, timeout=timeout)
        return _FakeResponse("-1")

    monkeypatch.setattr(scraper.requests, "post", fake_post)

    assert scraper.fetch_levels_page(_server(), 16, 3) is None
    assert captured["data"]["type"] == 16
    assert captured["data"]["page"] == 3
    assert captured["data"]["secret"] == "secret"
    assert captured["headers"] == {"User-Agent": ""}
    assert captured["timeout"] == 5


@pytest.mark.light
def test_fetch_levels_page_wraps_request_errors(monkeypatch):
    def failing_post(*args, **kwargs):
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(scraper.requests, "post", failing_post)
    with pytest.raises(FetchError):
        scraper.fetch_levels_page(_server(), 6, 0)

    monkeypatch.setattr(scraper.requests, "post", lambda *a, **k: _FakeResponse("", 500))
    with pytest.raises(FetchError):
        scraper.fetch_levels_page(_server(), 6, 0)
