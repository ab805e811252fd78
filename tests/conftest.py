from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gdstats.models import DemonDifficulty, Difficulty, GDLevel, GDSong


def make_level(
    level_id: int,
    difficulty: Difficulty = Difficulty.EASY,
    demon_difficulty: Optional[DemonDifficulty] = None,
    featured_score: int = 1,
    epic: bool = False,
    downloads: int = 0,
    likes: int = 0,
    description: str = "",
    name: Optional[str] = None,
    creator: str = "creator",
    song: Optional[GDSong] = None,
) -> GDLevel:
    """テスト用の GDLevel を組み立てる。"""
    return GDLevel(
        id=level_id,
        name=name if name is not None else f"Level {level_id}",
        creator=creator,
        difficulty=difficulty,
        demon_difficulty=demon_difficulty,
        stars=10 if difficulty is Difficulty.DEMON else 2,
        featured_score=featured_score,
        epic=epic,
        downloads=downloads,
        likes=likes,
        description=description,
        song=song,
    )


def make_demon(level_id: int, demon: DemonDifficulty = DemonDifficulty.HARD, **kwargs) -> GDLevel:
    """テスト用の Demon レベルを組み立てる。"""
    return make_level(level_id, Difficulty.DEMON, demon, **kwargs)


@pytest.fixture
def level_factory() -> Callable[..., GDLevel]:
    return make_level


@pytest.fixture
def demon_factory() -> Callable[..., GDLevel]:
    return make_demon
