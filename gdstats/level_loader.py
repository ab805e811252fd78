"""レベルサーバーから一覧をページ単位で取得し、GDLevel のリストへ変換する。"""

from __future__ import annotations

import logging
import time
from typing import Callable, List

from gdstats.config import ServerConfig
from gdstats.models import GDLevel, dedupe_levels
from gdstats.parser import parse_levels_response
from gdstats.scraper import fetch_levels_page

logger = logging.getLogger(__name__)


def fetch_levels(
    server: ServerConfig,
    level_type: int,
    sleep: Callable[[float], None] = time.sleep,
) -> List[GDLevel]:
    """
    指定種別のレベル一覧を全ページ取得する。

    以下のいずれかで取得を終了する:
    - サーバーが結果なし("-1")を返した
    - ページにレベルが含まれない
    - ページ情報上の最終ページに達した
    - max_pages に達した

    Args:
        server: レベルサーバー接続設定。
        level_type: 一覧種別(type パラメータ)。
        sleep: ページ間の待機関数。

    Returns:
        id 重複を除いた GDLevel のリスト。

    Raises:
        FetchError: 通信に失敗した場合。
        ParseError: レスポンスの解析に失敗した場合。
    """
    levels: List[GDLevel] = []

    for page in range(server.max_pages):
        if page > 0 and server.request_interval_sec > 0:
            sleep(server.request_interval_sec)

        text = fetch_levels_page(server, level_type, page)
        if text is None:
            break

        page_levels, page_info = parse_levels_response(text)
        logger.debug(
            "type=%s page=%s: %s levels (%s/%s)",
            level_type, page, len(page_levels), page_info.offset, page_info.total,
        )
        if not page_levels:
            break

        levels.extend(page_levels)
        if page_info.is_last:
            break

    return dedupe_levels(levels)


def fetch_featured_levels(server: ServerConfig) -> List[GDLevel]:
    """Featured 一覧を取得する。"""
    return fetch_levels(server, server.featured_type)


def fetch_epic_levels(server: ServerConfig) -> List[GDLevel]:
    """Epic 一覧を取得する。"""
    return fetch_levels(server, server.epic_type)
