import logging
import os
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from gdstats.classification import SortingCode
from gdstats.config import ServerConfig, Settings, load_settings
from gdstats.discord_notify import send_discord
from gdstats.errors import FetchError, ParseError
from gdstats.level_loader import fetch_epic_levels, fetch_featured_levels
from gdstats.models import GDLevel, dedupe_levels
from gdstats.output import WriteSummary, write_run, write_top_demons
from gdstats.report import RunMode, generate_run, generate_top_demons

logger = logging.getLogger(__name__)


def now_iso() -> str:
    """
    現在のUTC時刻をISO 8601形式の文字列で取得する。

    Returns:
        str: ISO 8601形式でフォーマットされた現在のUTC時刻文字列。
    """
    return datetime.now(timezone.utc).isoformat()


def process_run(
    levels: List[GDLevel],
    run_mode: RunMode,
    sorting_code: SortingCode,
    output_dir: str,
) -> Optional[WriteSummary]:
    """
    Featured/Epic のレポート一式を生成して書き込む。

    対象レベルが0件の場合は警告ログを出し、何も書き込まずに None を返す。
    """
    report = generate_run(levels, run_mode, sorting_code)
    if report is None:
        logger.warning("%s levels list is empty! No changes were made.", run_mode.value)
        return None

    summary = write_run(output_dir, run_mode, sorting_code, report)
    logger.info(
        "All %s lists are finished (%d written, %d failed)",
        run_mode.value.lower(), len(summary.written), len(summary.failed),
    )
    return summary


def process_top_demons(
    levels: List[GDLevel],
    output_dir: str,
    limit: int,
) -> Optional[WriteSummary]:
    """上位 Demon 表を生成して書き込む。Demon が0件の場合は None を返す。"""
    artifact = generate_top_demons(levels, limit=limit)
    if artifact is None:
        logger.warning("No demon levels found! Top demons list was not updated.")
        return None

    summary = write_top_demons(output_dir, artifact)
    logger.info("Top-%d demon list finished", limit)
    return summary


@dataclass
class RunOutcome:
    """
    run の結果。

    Attributes:
        summary: 全実行分の書き込み結果。
        errors: 取得に失敗した一覧の名前(例: "Epic")。
    """

    summary: WriteSummary = field(default_factory=WriteSummary)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.summary.failed


def _fetch(
    fetcher: Callable[[ServerConfig], List[GDLevel]],
    server: ServerConfig,
    name: str,
    outcome: RunOutcome,
) -> Optional[List[GDLevel]]:
    """一覧を取得する。取得/解析に失敗した場合はログを出して None を返す。"""
    try:
        levels = fetcher(server)
    except (FetchError, ParseError):
        logger.exception("Failed to fetch %s levels", name.lower())
        outcome.errors.append(name)
        return None
    logger.info("Fetched %d %s levels", len(levels), name.lower())
    return levels


def _merge(outcome: RunOutcome, result: Optional[WriteSummary]) -> None:
    if result is not None:
        outcome.summary.merge(result)


def run(settings: Settings) -> RunOutcome:
    """
    レベルの取得からレポート書き込みまでを実行する。

    以下の処理を順序実行する:
    1. Featured 一覧を取得し、Featured レポート一式を書き込み
    2. Epic 一覧を取得
    3. 上位 Demon 表を書き込み(取得できた Featured と Epic の和集合が対象)
    4. Epic レポート一式を書き込み

    一方の一覧の取得に失敗しても、もう一方の処理は継続する。
    UnmappedValueError は致命的なエラーとしてそのまま送出する。

    Returns:
        RunOutcome。
    """
    outcome = RunOutcome()
    output_dir = settings.output_dir
    sorting = settings.default_sorting

    featured = _fetch(fetch_featured_levels, settings.server, RunMode.FEATURED.value, outcome)
    if featured is not None:
        _merge(outcome, process_run(featured, RunMode.FEATURED, sorting, output_dir))

    epic = _fetch(fetch_epic_levels, settings.server, RunMode.EPIC.value, outcome)

    if featured is not None or epic is not None:
        population = dedupe_levels((featured or []) + (epic or []))
        _merge(outcome, process_top_demons(population, output_dir, settings.top_demons_limit))

    if epic is not None:
        _merge(outcome, process_run(epic, RunMode.EPIC, sorting, output_dir))

    return outcome


def main():
    """
    Geometry Dash レベル統計レポートの更新を行うメイン処理。

    環境変数の要件:
    - SETTINGS_PATH: 設定ファイルパス(デフォルト: "settings.yaml")
    - DISCORD_WEBHOOK_URL: Discord通知先(オプション)
    - LOG_LEVEL: ログレベル(デフォルト: "INFO")
    Raises:
        Exception: 処理中に任意のエラーが発生した場合。
                   エラー内容はDiscordに通知される（設定済みの場合）
        SystemExit: 一覧の取得または書き込みに失敗したものがある場合。
    """
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    discord_webhook = os.environ.get("DISCORD_WEBHOOK_URL")

    try:
        settings = load_settings(os.environ.get("SETTINGS_PATH", "settings.yaml"))
        outcome = run(settings)
    except Exception:
        err = traceback.format_exc()
        logger.error("レポート生成に失敗しました\n%s", err)

        if discord_webhook:
            msg = (
                f"❌ GD statistics 更新失敗\n"
                f"```{err[:1800]}```"
            )
            send_discord(discord_webhook, msg)

        raise

    summary = outcome.summary
    if discord_webhook:
        status = "✅ GD statistics 更新成功" if outcome.ok else "⚠️ GD statistics 更新一部失敗"
        msg = (
            f"{status}\n"
            f"- written: {len(summary.written)}\n"
            f"- failed: {len(summary.failed)}\n"
            f"- fetch_errors: {', '.join(outcome.errors) or '-'}\n"
            f"- updated_at: {now_iso()}\n"
        )
        send_discord(discord_webhook, msg)

    if not outcome.ok:
        raise SystemExit(1)

    print("SUCCESS")


if __name__ == "__main__":
    main()
