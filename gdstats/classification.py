"""
難易度ティアとソートコードの分類テーブルを提供するモジュール。

- DifficultyTier: 0〜11 の難易度ティア。0 はサブフォルダ無しの集計用
- SortingCode: レポートの並び順 6 種
- 各値からフォルダ名/ファイル名サフィックスへの対応表

対応表は読み取り専用の定数として import 時に一度だけ構築する。
表に存在しない値の参照はプログラム不整合として UnmappedValueError を送出する。
"""

from __future__ import annotations

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Tuple

from gdstats.errors import UnmappedValueError
from gdstats.models import DemonDifficulty, Difficulty, GDLevel


class DifficultyTier(IntEnum):
    """レポートの難易度ティア。"""

    NONE = 0
    AUTO = 1
    EASY = 2
    NORMAL = 3
    HARD = 4
    HARDER = 5
    INSANE = 6
    EASY_DEMON = 7
    MEDIUM_DEMON = 8
    HARD_DEMON = 9
    INSANE_DEMON = 10
    EXTREME_DEMON = 11

    @property
    def is_demon(self) -> bool:
        return self >= DifficultyTier.EASY_DEMON


class SortingCode(Enum):
    """レポートの並び順。"""

    DEFAULT = "default"
    ASCENDING_LIKES = "ascending_likes"
    DESCENDING_LIKES = "descending_likes"
    ASCENDING_DOWNLOADS = "ascending_downloads"
    DESCENDING_DOWNLOADS = "descending_downloads"
    LONGEST_DESCRIPTION = "longest_description"


LEVEL_TIERS: Tuple[DifficultyTier, ...] = tuple(
    t for t in DifficultyTier if t is not DifficultyTier.NONE
)

DEMON_TIERS: Tuple[DifficultyTier, ...] = tuple(t for t in LEVEL_TIERS if t.is_demon)

DIFFICULTY_FOLDER_MAP: Mapping[DifficultyTier, str] = MappingProxyType({
    DifficultyTier.NONE: "",
    DifficultyTier.AUTO: "Auto",
    DifficultyTier.EASY: "Easy",
    DifficultyTier.NORMAL: "Normal",
    DifficultyTier.HARD: "Hard",
    DifficultyTier.HARDER: "Harder",
    DifficultyTier.INSANE: "Insane",
    DifficultyTier.EASY_DEMON: "Easy Demon",
    DifficultyTier.MEDIUM_DEMON: "Medium Demon",
    DifficultyTier.HARD_DEMON: "Hard Demon",
    DifficultyTier.INSANE_DEMON: "Insane Demon",
    DifficultyTier.EXTREME_DEMON: "Extreme Demon",
})

SORTING_FILE_SUFFIX: Mapping[SortingCode, str] = MappingProxyType({
    SortingCode.DEFAULT: " list.md",
    SortingCode.DESCENDING_LIKES: " list with descending likes.md",
    SortingCode.ASCENDING_LIKES: " list with ascending likes.md",
    SortingCode.DESCENDING_DOWNLOADS: " list with descending downloads.md",
    SortingCode.ASCENDING_DOWNLOADS: " list with ascending downloads.md",
    SortingCode.LONGEST_DESCRIPTION: " list with longest descriptions.md",
})

_DIFFICULTY_TIER_MAP: Mapping[Difficulty, DifficultyTier] = MappingProxyType({
    Difficulty.AUTO: DifficultyTier.AUTO,
    Difficulty.EASY: DifficultyTier.EASY,
    Difficulty.NORMAL: DifficultyTier.NORMAL,
    Difficulty.HARD: DifficultyTier.HARD,
    Difficulty.HARDER: DifficultyTier.HARDER,
    Difficulty.INSANE: DifficultyTier.INSANE,
})

_DEMON_TIER_MAP: Mapping[DemonDifficulty, DifficultyTier] = MappingProxyType({
    DemonDifficulty.EASY: DifficultyTier.EASY_DEMON,
    DemonDifficulty.MEDIUM: DifficultyTier.MEDIUM_DEMON,
    DemonDifficulty.HARD: DifficultyTier.HARD_DEMON,
    DemonDifficulty.INSANE: DifficultyTier.INSANE_DEMON,
    DemonDifficulty.EXTREME: DifficultyTier.EXTREME_DEMON,
})


def folder_label(tier: DifficultyTier) -> str:
    """
    難易度ティアに対応するフォルダ名を返す。

    Args:
        tier: 難易度ティア。int を渡した場合は DifficultyTier に変換する。

    Returns:
        フォルダ名。ティア 0 は空文字。

    Raises:
        UnmappedValueError: 0〜11 以外の値が渡された場合。
    """
    try:
        return DIFFICULTY_FOLDER_MAP[DifficultyTier(tier)]
    except (ValueError, KeyError) as e:
        raise UnmappedValueError(f"Unmapped difficulty tier: {tier!r}") from e


def file_suffix(sorting_code: SortingCode) -> str:
    """
    ソートコードに対応するファイル名サフィックスを返す。

    Raises:
        UnmappedValueError: 対応表に無い値が渡された場合。
    """
    try:
        return SORTING_FILE_SUFFIX[sorting_code]
    except (KeyError, TypeError) as e:
        raise UnmappedValueError(f"Unmapped sorting code: {sorting_code!r}") from e


def tier_of(level: GDLevel) -> DifficultyTier:
    """
    レベルの難易度(および Demon 細分難易度)からティアを判定する。

    Args:
        level: 対象レベル。

    Returns:
        1〜11 の難易度ティア。

    Raises:
        UnmappedValueError: 難易度が N/A、または Demon で細分難易度が無い場合。
    """
    if level.difficulty is Difficulty.DEMON:
        tier = _DEMON_TIER_MAP.get(level.demon_difficulty)
    else:
        tier = _DIFFICULTY_TIER_MAP.get(level.difficulty)

    if tier is None:
        raise UnmappedValueError(
            f"Level {level.id} has no tier: "
            f"{level.difficulty!r}/{level.demon_difficulty!r}"
        )
    return tier


def _description_length_desc(level: GDLevel) -> Tuple[int, int]:
    return (-level.description_length, level.id)


_SORT_KEYS: Mapping[SortingCode, Callable[[GDLevel], Tuple[int, int]]] = MappingProxyType({
    SortingCode.DEFAULT: lambda lv: (-lv.featured_score, lv.id),
    SortingCode.ASCENDING_LIKES: lambda lv: (lv.likes, lv.id),
    SortingCode.DESCENDING_LIKES: lambda lv: (-lv.likes, lv.id),
    SortingCode.ASCENDING_DOWNLOADS: lambda lv: (lv.downloads, lv.id),
    SortingCode.DESCENDING_DOWNLOADS: lambda lv: (-lv.downloads, lv.id),
    SortingCode.LONGEST_DESCRIPTION: _description_length_desc,
})


def sort_levels(levels: Iterable[GDLevel], sorting_code: SortingCode) -> List[GDLevel]:
    """
    ソートコードに従ってレベルを並べ替えた新しいリストを返す。

    全ての並び順で同値の場合は id 昇順とし、入力順に依存しない結果にする。

    Raises:
        UnmappedValueError: 対応表に無いソートコードが渡された場合。
    """
    try:
        key = _SORT_KEYS[sorting_code]
    except (KeyError, TypeError) as e:
        raise UnmappedValueError(f"Unmapped sorting code: {sorting_code!r}") from e
    return sorted(levels, key=key)
