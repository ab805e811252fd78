"""
レベルサーバーへの通信処理。

getGJLevels21.php へフォームを POST し、レスポンス文字列を返す責務を持つ。
レスポンスの解析は parser.py 側で行い、本モジュールは通信のみを担当する。

例外方針:
- requests 由来の例外は FetchError に変換して上位へ伝播する。
- サーバーのエラーマーカー("-1")は「結果なし」として None を返す。
"""

from __future__ import annotations

from typing import Optional

import requests

from gdstats.config import ServerConfig
from gdstats.errors import FetchError


NO_RESULT_MARKER = "-1"

# サーバーは User-Agent 付きのリクエストを拒否する
_HEADERS = {"User-Agent": ""}


def fetch_levels_page(server: ServerConfig, level_type: int, page: int) -> Optional[str]:
    """
    レベル一覧の1ページを取得する。

    Args:
        server: レベルサーバー接続設定。
        level_type: 一覧種別(type パラメータ)。
        page: 0 始まりのページ番号。

    Returns:
        レスポンス文字列。該当レベルが無い場合は None。

    Raises:
        FetchError: HTTPエラーや通信失敗が発生した場合。
    """
    payload = {
        "gameVersion": server.game_version,
        "binaryVersion": server.binary_version,
        "secret": server.secret,
        "type": level_type,
        "page": page,
        "str": "",
    }

    try:
        r = requests.post(
            server.url, data=payload, headers=_HEADERS, timeout=server.timeout_sec
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(
            f"Level fetch failed: type={level_type} page={page} ({e})"
        ) from e

    text = r.text.strip()
    if not text or text == NO_RESULT_MARKER:
        return None
    return text
