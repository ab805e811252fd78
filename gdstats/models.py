"""
データモデル定義モジュール。

レベルサーバーから取得した情報をレポート生成に渡すための
GDLevel（1レベル分の情報）と GDSong（楽曲情報）を定義する。

GDLevel は id のみで同一性を判定する。
キャッシュ由来の古いコピーなど他フィールドが食い違っていても、
id が同じであれば同じレベルとして扱う。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional


DESCRIPTION_DELIMITER = "|"
DESCRIPTION_DELIMITER_ESCAPE = "&#124;"

UNKNOWN_SONG_NAME = "Unknown"


class Difficulty(Enum):
    """レベルの難易度。"""

    NA = "N/A"
    AUTO = "Auto"
    EASY = "Easy"
    NORMAL = "Normal"
    HARD = "Hard"
    HARDER = "Harder"
    INSANE = "Insane"
    DEMON = "Demon"


class DemonDifficulty(Enum):
    """Demon レベルの細分難易度。"""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    INSANE = "Insane"
    EXTREME = "Extreme"


@dataclass(frozen=True, eq=False)
class GDSong:
    """
    レベルで使用される楽曲情報。

    Attributes:
        id: 楽曲ID。公式曲は負のIDを割り当てる。
        name: 曲名。
        artist: アーティスト名。
        size_mb: ファイルサイズ(MB)。公式曲は None。
        is_custom: Newgrounds のカスタム曲であれば True。
    """

    id: int
    name: str
    artist: str
    size_mb: Optional[float] = None
    is_custom: bool = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GDSong):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_placeholder(self) -> bool:
        """楽曲セクションに情報が無く、曲名/アーティストが不明の場合 True。"""
        return self.name == UNKNOWN_SONG_NAME and self.artist == UNKNOWN_SONG_NAME


@dataclass(frozen=True, eq=False)
class GDLevel:
    """
    1レベル分の統計情報および属性を保持するモデル。

    - featured_score が 0 以下のレベルは Featured ではない
    - demon_difficulty は difficulty が DEMON の場合のみ設定される
    - 等価判定・ハッシュは id のみを用いる
    """

    id: int
    name: str
    creator: str
    difficulty: Difficulty
    demon_difficulty: Optional[DemonDifficulty]
    stars: int
    featured_score: int
    epic: bool
    downloads: int
    likes: int
    description: str
    song: Optional[GDSong] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GDLevel):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return (
            f'"{self.name}" by {self.creator} ({self.id})'
            f" — likes: {self.likes}, downloads: {self.downloads}"
        )

    @property
    def is_featured(self) -> bool:
        return self.featured_score > 0

    @property
    def is_awarded(self) -> bool:
        return self.stars > 0

    @property
    def is_demon(self) -> bool:
        return self.difficulty is Difficulty.DEMON

    @property
    def description_length(self) -> int:
        """説明文の文字数。ゲーム側の表示に合わせ UTF-16 のコード単位で数える。"""
        return len(self.description.encode("utf-16-le")) // 2

    def escaped_description(self) -> str:
        """表の列区切り文字を実体参照へ置換した説明文を返す。"""
        return self.description.replace(
            DESCRIPTION_DELIMITER, DESCRIPTION_DELIMITER_ESCAPE
        )

    def markdown_row(self) -> str:
        """
        Markdown 表の1行を返す。

        Returns:
            名前、作者、ID、ダウンロード数、いいね数を含む行。
        """
        return (
            f"| {self.name} | {self.creator} | {self.id}"
            f" | {self.downloads} | {self.likes} |"
        )

    def markdown_description_row(self) -> str:
        """
        説明文レポート用の Markdown 表の1行を返す。

        説明文中の "|" は列数を崩さないよう "&#124;" に置換する。

        Returns:
            名前、作者、ID、説明文の文字数、説明文を含む行。
        """
        return (
            f"| {self.name} | {self.creator} | {self.id}"
            f" | {self.description_length} | {self.escaped_description()} |"
        )


def dedupe_levels(levels: Iterable[GDLevel]) -> List[GDLevel]:
    """
    id が重複するレベルを1件にまとめる。

    同じ id が複数回現れた場合は最後に現れたものを採用する。

    Args:
        levels: レベルの列。

    Returns:
        id ごとに1件となったレベルのリスト（初出順）。
    """
    by_id: dict[int, GDLevel] = {}
    for level in levels:
        by_id[level.id] = level
    return list(by_id.values())
