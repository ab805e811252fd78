"""
レベルサーバーのレスポンスパーサ。

getGJLevels21.php のレスポンス文字列を解析し、GDLevel のリストと
ページ情報へ変換する責務を持つ。

想定フォーマット("#" 区切りのセクション):
- 1: レベル。"|" 区切りで、各レベルは "key:value:key:value..." 形式
- 2: 作者。"|" 区切りで、各作者は "userID:名前:accountID" 形式
- 3: 楽曲。"~:~" 区切りで、各楽曲は "key~|~value~|~..." 形式
- 4: ページ情報。"総数:オフセット:件数" 形式
- 5: ハッシュ(未使用)
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from gdstats.errors import ParseError
from gdstats.models import (
    UNKNOWN_SONG_NAME,
    DemonDifficulty,
    Difficulty,
    GDLevel,
    GDSong,
)


@dataclass(frozen=True)
class PageInfo:
    """
    レスポンスのページ情報。

    Attributes:
        total: 一覧全体の件数。
        offset: このページの先頭位置。
        count: 1ページあたりの件数。
    """

    total: int
    offset: int
    count: int

    @property
    def is_last(self) -> bool:
        return self.offset + self.count >= self.total


_DIFFICULTY_BY_NUMERATOR = {
    0: Difficulty.NA,
    10: Difficulty.EASY,
    20: Difficulty.NORMAL,
    30: Difficulty.HARD,
    40: Difficulty.HARDER,
    50: Difficulty.INSANE,
}

_DEMON_DIFFICULTY_BY_CODE = {
    0: DemonDifficulty.HARD,
    3: DemonDifficulty.EASY,
    4: DemonDifficulty.MEDIUM,
    5: DemonDifficulty.INSANE,
    6: DemonDifficulty.EXTREME,
}

OFFICIAL_SONGS: Tuple[Tuple[str, str], ...] = (
    ("Stereo Madness", "ForeverBound"),
    ("Back On Track", "DJVI"),
    ("Polargeist", "Step"),
    ("Dry Out", "DJVI"),
    ("Base After Base", "DJVI"),
    ("Cant Let Go", "DJVI"),
    ("Jumper", "Waterflame"),
    ("Time Machine", "Waterflame"),
    ("Cycles", "DJVI"),
    ("xStep", "DJVI"),
    ("Clutterfunk", "Waterflame"),
    ("Theory of Everything", "DJ-Nate"),
    ("Electroman Adventures", "Waterflame"),
    ("Clubstep", "DJ-Nate"),
    ("Electrodynamix", "DJ-Nate"),
    ("Hexagon Force", "Waterflame"),
    ("Blast Processing", "Waterflame"),
    ("Theory of Everything 2", "DJ-Nate"),
    ("Geometrical Dominator", "Waterflame"),
    ("Deadlocked", "F-777"),
    ("Fingerdash", "MDK"),
    ("Dash", "MDK"),
)


def _split_pairs(text: str, sep: str) -> Dict[str, str]:
    """
    "key{sep}value{sep}key{sep}value..." 形式の文字列を辞書に変換する。

    Raises:
        ParseError: 要素数が奇数の場合。
    """
    parts = text.split(sep)
    if len(parts) % 2 != 0:
        raise ParseError(f"Odd number of key/value tokens: {text[:80]}")
    return dict(zip(parts[0::2], parts[1::2]))


def _int(fields: Dict[str, str], key: str, default: int = 0) -> int:
    value = fields.get(key, "")
    if value == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ParseError(f"Invalid integer for key {key}: {value!r}") from e


def decode_description(raw: str) -> str:
    """
    URL-safe base64 の説明文をデコードする。

    base64 として解釈できない場合は入力をそのまま返す。
    """
    if not raw:
        return ""
    padded = raw + "=" * (-len(raw) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return raw


def official_song(index: int) -> GDSong:
    """公式曲のインデックスから GDSong を返す。公式曲は負のIDを持つ。"""
    song_id = -(index + 1)
    if 0 <= index < len(OFFICIAL_SONGS):
        name, artist = OFFICIAL_SONGS[index]
        return GDSong(id=song_id, name=name, artist=artist, is_custom=False)
    return GDSong(
        id=song_id, name=UNKNOWN_SONG_NAME, artist=UNKNOWN_SONG_NAME, is_custom=False
    )


def parse_creators(section: str) -> Dict[int, str]:
    """
    作者セクションを userID → 作者名 の辞書に変換する。

    Raises:
        ParseError: "userID:名前:accountID" 形式でない要素がある場合。
    """
    creators: Dict[int, str] = {}
    if not section:
        return creators

    for entry in section.split("|"):
        parts = entry.split(":")
        if len(parts) < 2:
            raise ParseError(f"Invalid creator entry: {entry}")
        try:
            creators[int(parts[0])] = parts[1]
        except ValueError as e:
            raise ParseError(f"Invalid creator id: {entry}") from e
    return creators


def parse_songs(section: str) -> Dict[int, GDSong]:
    """
    楽曲セクションを 楽曲ID → GDSong の辞書に変換する。

    Raises:
        ParseError: 楽曲IDが数値でない場合。
    """
    songs: Dict[int, GDSong] = {}
    if not section:
        return songs

    for entry in section.split("~:~"):
        fields = _split_pairs(entry, "~|~")
        song_id = _int(fields, "1", default=-1)
        if song_id < 0:
            raise ParseError(f"Song entry without id: {entry[:80]}")

        size_text = fields.get("5", "")
        try:
            size_mb: Optional[float] = float(size_text) if size_text else None
        except ValueError:
            size_mb = None

        songs[song_id] = GDSong(
            id=song_id,
            name=fields.get("2", ""),
            artist=fields.get("4", ""),
            size_mb=size_mb,
            is_custom=True,
        )
    return songs


def parse_page_info(section: str) -> PageInfo:
    """
    ページ情報セクションを PageInfo に変換する。

    Raises:
        ParseError: "総数:オフセット:件数" 形式でない場合。
    """
    parts = section.split(":")
    if len(parts) != 3:
        raise ParseError(f"Invalid page info: {section}")
    try:
        return PageInfo(total=int(parts[0]), offset=int(parts[1]), count=int(parts[2]))
    except ValueError as e:
        raise ParseError(f"Invalid page info: {section}") from e


def _difficulty(fields: Dict[str, str]) -> Tuple[Difficulty, Optional[DemonDifficulty]]:
    if _int(fields, "17") == 1:
        code = _int(fields, "43")
        demon = _DEMON_DIFFICULTY_BY_CODE.get(code)
        if demon is None:
            raise ParseError(f"Unknown demon difficulty code: {code}")
        return Difficulty.DEMON, demon

    if _int(fields, "25") == 1:
        return Difficulty.AUTO, None

    numerator = _int(fields, "9")
    difficulty = _DIFFICULTY_BY_NUMERATOR.get(numerator)
    if difficulty is None:
        raise ParseError(f"Unknown difficulty numerator: {numerator}")
    return difficulty, None


def parse_level(
    entry: str,
    creators: Dict[int, str],
    songs: Dict[int, GDSong],
) -> GDLevel:
    """
    レベル1件分の文字列を GDLevel に変換する。

    Args:
        entry: "key:value:..." 形式のレベル文字列。
        creators: userID → 作者名。
        songs: 楽曲ID → GDSong。

    Returns:
        GDLevel。

    Raises:
        ParseError: レベルIDが無い、または数値項目が不正な場合。
    """
    fields = _split_pairs(entry, ":")
    level_id = _int(fields, "1", default=-1)
    if level_id < 0:
        raise ParseError(f"Level entry without id: {entry[:80]}")

    difficulty, demon_difficulty = _difficulty(fields)

    custom_song_id = _int(fields, "35")
    if custom_song_id > 0:
        song = songs.get(custom_song_id) or GDSong(
            id=custom_song_id, name=UNKNOWN_SONG_NAME, artist=UNKNOWN_SONG_NAME
        )
    else:
        song = official_song(_int(fields, "12"))

    return GDLevel(
        id=level_id,
        name=fields.get("2", ""),
        creator=creators.get(_int(fields, "6"), "-"),
        difficulty=difficulty,
        demon_difficulty=demon_difficulty,
        stars=_int(fields, "18"),
        featured_score=_int(fields, "19"),
        epic=_int(fields, "42") > 0,
        downloads=_int(fields, "10"),
        likes=_int(fields, "14"),
        description=decode_description(fields.get("3", "")),
        song=song,
    )


def parse_levels_response(text: str) -> Tuple[List[GDLevel], PageInfo]:
    """
    getGJLevels21.php のレスポンス全体を解析する。

    Args:
        text: レスポンス文字列。

    Returns:
        (GDLevel のリスト, PageInfo) のタプル。

    Raises:
        ParseError: セクション数不足やフォーマット不正の場合。
    """
    sections = text.strip().split("#")
    if len(sections) < 4:
        raise ParseError(f"Response has insufficient sections: {len(sections)}")

    creators = parse_creators(sections[1])
    songs = parse_songs(sections[2])
    page_info = parse_page_info(sections[3])

    levels = [
        parse_level(entry, creators, songs)
        for entry in sections[0].split("|")
        if entry
    ]
    return levels, page_info
