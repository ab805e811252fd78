"""レベルサーバーのレスポンスパーサの fixture テスト。"""

from __future__ import annotations

import pytest

from gdstats.errors import ParseError
from gdstats.models import DemonDifficulty, Difficulty
from gdstats.parser import (
    decode_description,
    official_song,
    parse_levels_response,
    parse_page_info,
)

LEVEL_DEMON = (
    "1:10565740:2:Bloodbath:3:Qmxvb2RiYXRofHBpcGU:6:503085:8:10:9:50:10:35000000"
    ":12:0:14:900000:17:1:43:6:18:10:19:8:25::35:467339:42:1"
)
LEVEL_EASY = (
    "1:128:2:1st level:3::6:4:8:10:9:10:10:5000:12:3:14:300:17::43:0"
    ":18:2:19:0:25::35:0:42:0"
)
CREATORS = "503085:Riot:37415|4:Robtop:71"
SONGS = (
    "1~|~467339~|~2~|~At the Speed of Light~|~3~|~1~|~4~|~Dimrain47"
    "~|~5~|~9.56~|~10~|~http%3A%2F%2Fexample"
)
RESPONSE = f"{LEVEL_DEMON}|{LEVEL_EASY}#{CREATORS}#{SONGS}#9999:0:10#abcdef"


@pytest.mark.light
def test_parse_levels_response_minimal_fixture():
    levels, page_info = parse_levels_response(RESPONSE)

    assert [lv.id for lv in levels] == [10565740, 128]
    assert page_info.total == 9999
    assert page_info.is_last is False

    demon, easy = levels
    assert demon.name == "Bloodbath"
    assert demon.creator == "Riot"
    assert demon.difficulty is Difficulty.DEMON
    assert demon.demon_difficulty is DemonDifficulty.EXTREME
    assert demon.featured_score == 8
    assert demon.epic is True
    assert demon.likes == 900000
    assert demon.downloads == 35000000
    assert demon.description == "Bloodbath|pipe"
    assert demon.song.name == "At the Speed of Light"
    assert demon.song.size_mb == pytest.approx(9.56)

    assert easy.creator == "Robtop"
    assert easy.difficulty is Difficulty.EASY
    assert easy.demon_difficulty is None
    assert easy.is_featured is False
    assert easy.epic is False
    assert easy.description == ""
    assert easy.song == official_song(3)
    assert easy.song.name == "Dry Out"


@pytest.mark.light
def test_auto_flag_takes_precedence_over_numerator():
    level = "1:1:2:Auto:6:4:9:0:25:1"
    levels, _ = parse_levels_response(f"{level}#4:Robtop:71##1:0:10#x")
    assert levels[0].difficulty is Difficulty.AUTO
    assert levels[0].creator == "Robtop"


@pytest.mark.light
def test_unknown_creator_falls_back_to_dash():
    levels, _ = parse_levels_response("1:5:2:Lonely:6:999:9:20##" + "#1:0:10#x")
    assert levels[0].creator == "-"
    assert levels[0].difficulty is Difficulty.NORMAL


@pytest.mark.light
def test_parse_levels_response_raises_for_missing_sections():
    with pytest.raises(ParseError):
        parse_levels_response(LEVEL_EASY)


@pytest.mark.light
def test_parse_levels_response_raises_for_odd_tokens():
    with pytest.raises(ParseError):
        parse_levels_response("1:5:2#4:Robtop:71##1:0:10#x")


@pytest.mark.light
def test_parse_levels_response_raises_for_unknown_demon_code():
    with pytest.raises(ParseError):
        parse_levels_response("1:5:2:X:17:1:43:9##" + "#1:0:10#x")


@pytest.mark.light
def test_parse_page_info():
    info = parse_page_info("25:20:10")
    assert (info.total, info.offset, info.count) == (25, 20, 10)
    assert info.is_last is True
    with pytest.raises(ParseError):
        parse_page_info("25:20")


@pytest.mark.light
def test_decode_description_keeps_non_base64_text():
    assert decode_description("aGVsbG8") == "hello"
    assert decode_description("") == ""
    assert decode_description("not base64!") == "not base64!"
