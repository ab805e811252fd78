"""
Discord Webhook通知を行うユーティリティ。

このモジュールはレポート生成結果(成功/失敗/件数)をDiscordへ送信する用途で使用する。
通知失敗は処理全体の失敗とはみなさず、警告ログのみ出力する。
"""

from __future__ import annotations

import logging

import requests
from requests import RequestException

logger = logging.getLogger(__name__)

# Discord の content 上限(2000文字)に収める
MAX_CONTENT_LENGTH = 2000


def send_discord(webhook_url: str, message: str) -> None:
    """
    Discord Webhookへメッセージを送信する。

    webhook_urlが空の場合は何もせず終了する。
    通知失敗は致命的なエラーとせず、警告ログを出して終了する。

    Args:
        webhook_url: Discord Webhook URL。
        message: 送信する本文。上限を超える分は切り詰める。
    """
    if not webhook_url:
        return

    payload = {"content": message[:MAX_CONTENT_LENGTH]}

    try:
        r = requests.post(webhook_url, json=payload, timeout=15)
        r.raise_for_status()
    except RequestException as e:
        # 通知失敗は致命にしない
        logger.warning("Discord通知に失敗しました: %s", e)
