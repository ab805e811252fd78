"""
設定ファイル(settings.yaml)の読み込み処理を提供するモジュール。

settings.yaml からレポート生成に必要な各種設定を読み込み、
アプリ内で扱いやすい dataclass に変換する。
"""

from dataclasses import dataclass

import yaml

from gdstats.classification import SortingCode
from gdstats.report import TOP_DEMONS_LIMIT


DEFAULT_SERVER_URL = "http://www.boomlings.com/database/getGJLevels21.php"
DEFAULT_SECRET = "Wmfd2893gb7"


@dataclass(frozen=True)
class ServerConfig:
    """
    レベルサーバー接続設定。

    Attributes:
        url: getGJLevels21.php のURL。
        secret: リクエストに付与する secret。
        game_version: gameVersion パラメータ。
        binary_version: binaryVersion パラメータ。
        featured_type: Featured 一覧の type パラメータ。
        epic_type: Epic 一覧の type パラメータ。
        max_pages: 1回の取得で読む最大ページ数。
        request_interval_sec: ページ取得間の待機秒数。
        timeout_sec: requests に渡すタイムアウト秒。
    """

    url: str
    secret: str
    game_version: int
    binary_version: int
    featured_type: int
    epic_type: int
    max_pages: int
    request_interval_sec: float
    timeout_sec: int


@dataclass(frozen=True)
class Settings:
    """
    アプリケーション全体設定。

    Attributes:
        output_dir: レポートの出力ルートディレクトリ。
        default_sorting: Featured/Epic 実行時の並び順。
        top_demons_limit: 上位 Demon 表の件数。
        server: レベルサーバー接続設定。
    """

    output_dir: str
    default_sorting: SortingCode
    top_demons_limit: int
    server: ServerConfig


def load_settings(path: str) -> Settings:
    """
    settings.yaml を読み込み Settings に変換する。

    Args:
        path: settings.yaml のファイルパス。

    Returns:
        Settingsオブジェクト。

    Raises:
        FileNotFoundError: 設定ファイルが存在しない場合。
        KeyError: default_sorting が SortingCode に存在しない名前の場合。
        yaml.YAMLError: YAMLのパースに失敗した場合。
        ValueError: 数値項目の変換に失敗した場合。
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    server_data = data.get("server") or {}

    return Settings(
        output_dir=str(data.get("output_dir", "Statistics")),
        default_sorting=SortingCode[str(data.get("default_sorting", "DEFAULT")).upper()],
        top_demons_limit=int(data.get("top_demons_limit", TOP_DEMONS_LIMIT)),
        server=ServerConfig(
            url=str(server_data.get("url", DEFAULT_SERVER_URL)).strip(),
            secret=str(server_data.get("secret", DEFAULT_SECRET)),
            game_version=int(server_data.get("game_version", 21)),
            binary_version=int(server_data.get("binary_version", 35)),
            featured_type=int(server_data.get("featured_type", 6)),
            epic_type=int(server_data.get("epic_type", 16)),
            max_pages=int(server_data.get("max_pages", 500)),
            request_interval_sec=float(server_data.get("request_interval_sec", 1.0)),
            timeout_sec=int(server_data.get("timeout_sec", 30)),
        ),
    )
