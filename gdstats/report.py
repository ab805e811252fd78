"""
レポート生成エンジン。

レベル一覧・実行モード・ソートコードから、書き込み前の Markdown レポート群を
組み立てる。入出力は行わず、同じ入力からは常に同じ内容を返す。

generate_run が返す RunReport は以下の 16 スロットを固定順で持つ:
- ティア 1〜11 ごとの表（指定ソート）
- 対象レベル全体の表（指定ソート）
- 説明文の長い順の表（説明文の文字数と本文を含む）
- 楽曲情報の集計 / 楽曲情報の詳細集計
- 作者ごとの集計
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from gdstats.classification import (
    LEVEL_TIERS,
    DifficultyTier,
    SortingCode,
    sort_levels,
    tier_of,
)
from gdstats.models import GDLevel, GDSong, dedupe_levels


LEVEL_TABLE_HEADER = ("| Name | Creator | ID | Downloads | Likes |", "|---|---|---|---|---|")
DESCRIPTION_TABLE_HEADER = (
    "| Name | Creator | ID | Description length | Description |",
    "|---|---|---|---|---|",
)
AUDIO_TABLE_HEADER = ("| Song | Artist | Song ID |", "|---|---|---|")
AUDIO_EXPANDED_TABLE_HEADER = (
    "| Song | Artist | Song ID | Usages | Levels |",
    "|---|---|---|---|---|",
)
BUILDERS_TABLE_HEADER = ("| Creator | Levels |", "|---|---|")

TOP_DEMONS_LIMIT = 50


class RunMode(Enum):
    """対象レベルを選ぶ実行モード。"""

    FEATURED = "Featured"
    EPIC = "Epic"

    def qualifies(self, level: GDLevel) -> bool:
        if self is RunMode.FEATURED:
            return level.is_featured
        return level.epic


class ReportSlot(Enum):
    """レポート成果物の出力スロット。"""

    TIER = "tier"
    ALL_LEVELS = "all_levels"
    LONGEST_DESCRIPTIONS = "longest_descriptions"
    AUDIO_INFO = "audio_info"
    AUDIO_INFO_EXPANDED = "audio_info_expanded"
    BUILDERS_INFO = "builders_info"
    TOP_DEMONS = "top_demons"


@dataclass(frozen=True)
class ReportArtifact:
    """
    書き込み前のレポート1件。

    Attributes:
        slot: 出力スロット。
        lines: 本文の各行。
        tier: TIER スロットの場合の難易度ティア。それ以外は NONE。
    """

    slot: ReportSlot
    lines: Tuple[str, ...]
    tier: DifficultyTier = DifficultyTier.NONE

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n"

    @property
    def rows(self) -> Tuple[str, ...]:
        """ヘッダー2行を除いたデータ行。"""
        return self.lines[2:]


@dataclass(frozen=True)
class RunReport:
    """
    generate_run の結果。16 件の成果物をスロット名付きで保持する。

    Attributes:
        tiers: ティア 1〜11 の表（ティア順）。
        all_levels: 対象レベル全体の表。
        longest_descriptions: 説明文の長い順の表。
        audio_info: 楽曲ごとの一覧。
        audio_info_expanded: 楽曲ごとの使用数付き一覧。
        builders_info: 作者ごとのレベル数。
    """

    tiers: Tuple[ReportArtifact, ...]
    all_levels: ReportArtifact
    longest_descriptions: ReportArtifact
    audio_info: ReportArtifact
    audio_info_expanded: ReportArtifact
    builders_info: ReportArtifact

    def tier(self, tier: DifficultyTier) -> ReportArtifact:
        return self.tiers[LEVEL_TIERS.index(tier)]

    def artifacts(self) -> List[ReportArtifact]:
        """16 件の成果物を固定スロット順で返す。"""
        return [
            *self.tiers,
            self.all_levels,
            self.longest_descriptions,
            self.audio_info,
            self.audio_info_expanded,
            self.builders_info,
        ]


def _table(header: Sequence[str], rows: Iterable[str]) -> Tuple[str, ...]:
    return tuple(header) + tuple(rows)


def render_level_table(levels: Iterable[GDLevel]) -> Tuple[str, ...]:
    """レベル一覧の Markdown 表を返す。"""
    return _table(LEVEL_TABLE_HEADER, (lv.markdown_row() for lv in levels))


def render_description_table(levels: Iterable[GDLevel]) -> Tuple[str, ...]:
    """説明文の文字数と本文を含む Markdown 表を返す。"""
    return _table(
        DESCRIPTION_TABLE_HEADER, (lv.markdown_description_row() for lv in levels)
    )


def _songs_usage(levels: Iterable[GDLevel]) -> Dict[GDSong, List[GDLevel]]:
    """
    楽曲IDごとに使用レベルをまとめる。

    同じ楽曲IDで曲名などが食い違う場合は、プレースホルダー以外を優先し、
    その中で最小のレベルIDが持つ楽曲情報を代表とする。
    """
    by_id: Dict[int, List[GDLevel]] = defaultdict(list)
    for level in levels:
        if level.song is None:
            continue
        by_id[level.song.id].append(level)

    usage: Dict[GDSong, List[GDLevel]] = {}
    for used_by in by_id.values():
        representative = min(used_by, key=lambda lv: (lv.song.is_placeholder, lv.id))
        usage[representative.song] = used_by
    return usage


def render_audio_info(levels: Iterable[GDLevel]) -> Tuple[str, ...]:
    """
    楽曲ごとの一覧表を返す。

    同じ楽曲IDは1行にまとめ、楽曲ID昇順に並べる。

    Args:
        levels: 集計対象のレベル。楽曲情報の無いレベルは無視する。

    Returns:
        Markdown 表の各行。
    """
    songs = sorted(_songs_usage(levels), key=lambda s: s.id)
    return _table(
        AUDIO_TABLE_HEADER,
        (f"| {s.name} | {s.artist} | {s.id} |" for s in songs),
    )


def render_audio_info_expanded(levels: Iterable[GDLevel]) -> Tuple[str, ...]:
    """
    楽曲ごとの使用数と使用レベル名を含む一覧表を返す。

    使用数の降順、同数の場合は楽曲ID昇順に並べる。
    使用レベル名は id 昇順で ", " 区切りとする。

    Args:
        levels: 集計対象のレベル。楽曲情報の無いレベルは無視する。

    Returns:
        Markdown 表の各行。
    """
    usage = _songs_usage(levels)
    songs = sorted(usage, key=lambda s: (-len(usage[s]), s.id))

    rows = []
    for song in songs:
        used_by = sorted(usage[song], key=lambda lv: lv.id)
        names = ", ".join(lv.name for lv in used_by)
        rows.append(
            f"| {song.name} | {song.artist} | {song.id} | {len(used_by)} | {names} |"
        )
    return _table(AUDIO_EXPANDED_TABLE_HEADER, rows)


def render_builders_info(levels: Iterable[GDLevel]) -> Tuple[str, ...]:
    """
    作者ごとのレベル数一覧表を返す。

    レベル数の降順、同数の場合は作者名の昇順に並べる。
    """
    counts: Dict[str, int] = defaultdict(int)
    for level in levels:
        counts[level.creator] += 1

    creators = sorted(counts, key=lambda c: (-counts[c], c.casefold(), c))
    return _table(BUILDERS_TABLE_HEADER, (f"| {c} | {counts[c]} |" for c in creators))


def _qualifying_levels(
    levels: Iterable[GDLevel], predicate: Callable[[GDLevel], bool]
) -> List[GDLevel]:
    return [lv for lv in dedupe_levels(levels) if predicate(lv)]


def generate_run(
    levels: Iterable[GDLevel],
    run_mode: RunMode,
    sorting_code: SortingCode,
) -> Optional[RunReport]:
    """
    実行モードの対象レベルから 16 件のレポートを生成する。

    Args:
        levels: 取得済みの全レベル。対象外のレベルを含んでよい。
            id が重複する場合は最後に現れたものを採用する。
        run_mode: 対象レベルを選ぶ実行モード。
        sorting_code: ティア別表と全体表に適用する並び順。

    Returns:
        RunReport。対象レベルが0件の場合は None（何も書き込まないことを示す）。

    Raises:
        UnmappedValueError: ティア判定できないレベル、または未知のソートコードの場合。
    """
    qualifying = _qualifying_levels(levels, run_mode.qualifies)
    if not qualifying:
        return None

    ordered = sort_levels(qualifying, sorting_code)

    by_tier: Dict[DifficultyTier, List[GDLevel]] = {t: [] for t in LEVEL_TIERS}
    for level in ordered:
        by_tier[tier_of(level)].append(level)

    tiers = tuple(
        ReportArtifact(
            slot=ReportSlot.TIER,
            lines=render_level_table(by_tier[t]),
            tier=t,
        )
        for t in LEVEL_TIERS
    )

    longest = sort_levels(qualifying, SortingCode.LONGEST_DESCRIPTION)

    return RunReport(
        tiers=tiers,
        all_levels=ReportArtifact(ReportSlot.ALL_LEVELS, render_level_table(ordered)),
        longest_descriptions=ReportArtifact(
            ReportSlot.LONGEST_DESCRIPTIONS, render_description_table(longest)
        ),
        audio_info=ReportArtifact(ReportSlot.AUDIO_INFO, render_audio_info(qualifying)),
        audio_info_expanded=ReportArtifact(
            ReportSlot.AUDIO_INFO_EXPANDED, render_audio_info_expanded(qualifying)
        ),
        builders_info=ReportArtifact(
            ReportSlot.BUILDERS_INFO, render_builders_info(qualifying)
        ),
    )


def generate_top_demons(
    levels: Iterable[GDLevel],
    limit: int = TOP_DEMONS_LIMIT,
) -> Optional[ReportArtifact]:
    """
    いいね数上位の Demon レベル表を生成する。

    Demon 以外のレベルはいいね数に関わらず除外する。

    Args:
        levels: 取得済みの全レベル。
        limit: 表に含める最大件数。

    Returns:
        ReportArtifact。Demon レベルが0件の場合は None。
    """
    demons = _qualifying_levels(levels, lambda lv: lv.is_demon)
    if not demons:
        return None

    top = sort_levels(demons, SortingCode.DESCENDING_LIKES)[:limit]
    return ReportArtifact(ReportSlot.TOP_DEMONS, render_level_table(top))
