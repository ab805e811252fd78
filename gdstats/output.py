"""
レポートの出力先決定とファイル書き込みを行うモジュール。

出力先は以下の規則で決まる:

    <base_dir>/[<ティアのフォルダ名>/]<プレフィックス><ソートコードのサフィックス>

- ティア 0 はサブフォルダを作らず base_dir 直下に書き込む
- プレフィックスは "<ティア名> featured" / "Featured" / "Top 50 popular demons" など
- 異なる (ティア, 実行モード, ソートコード, スロット) が同じパスになることはない

書き込みはベストエフォートで行い、1ファイルの失敗で他のファイルの書き込みを止めない。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from gdstats.classification import (
    DifficultyTier,
    SortingCode,
    file_suffix,
    folder_label,
)
from gdstats.report import ReportArtifact, ReportSlot, RunMode, RunReport

logger = logging.getLogger(__name__)

TOP_DEMONS_PREFIX = "Top 50 popular demons"

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class WriteSummary:
    """
    書き込み結果の集計。

    Attributes:
        written: 書き込みに成功したパス。
        failed: 書き込みに失敗したパス。
    """

    written: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)

    def merge(self, other: "WriteSummary") -> None:
        self.written.extend(other.written)
        self.failed.extend(other.failed)


def build_prefix(tier: DifficultyTier, run_mode: Optional[RunMode]) -> str:
    """
    ティアと実行モードからファイル名プレフィックスを組み立てる。

    Args:
        tier: 難易度ティア。
        run_mode: 実行モード。None はモードに依存しないレポート（上位 Demon 表など）。

    Returns:
        ファイル名プレフィックス。
    """
    label = folder_label(tier)
    if run_mode is None:
        return label if label else TOP_DEMONS_PREFIX
    if label:
        return f"{label} {run_mode.value.lower()}"
    return run_mode.value


def destination_path(
    base_dir: PathLike,
    tier: DifficultyTier,
    prefix: str,
    sorting_code: SortingCode,
) -> Path:
    """出力先パスを計算する。ディレクトリは作成しない。"""
    folder = Path(base_dir)
    label = folder_label(tier)
    if label:
        folder = folder / label
    return folder / f"{prefix}{file_suffix(sorting_code)}"


def resolve_destination(
    base_dir: PathLike,
    tier: DifficultyTier,
    prefix: str,
    sorting_code: SortingCode,
) -> Path:
    """
    成果物の出力先パスを返す。

    必要なディレクトリは作成する。既に存在する場合はエラーにしない。

    Args:
        base_dir: レポートの出力ルート。
        tier: 難易度ティア。0 の場合はサブフォルダを作らない。
        prefix: ファイル名プレフィックス。
        sorting_code: ファイル名サフィックスを決めるソートコード。

    Returns:
        出力先パス。

    Raises:
        UnmappedValueError: 未知のティアまたはソートコードの場合。
    """
    path = destination_path(base_dir, tier, prefix, sorting_code)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _run_targets(
    run_mode: RunMode,
    sorting_code: SortingCode,
    report: RunReport,
) -> List[Tuple[ReportArtifact, DifficultyTier, str, SortingCode]]:
    """RunReport の各成果物と (ティア, プレフィックス, ソートコード) の組を返す。"""
    targets = [
        (artifact, artifact.tier, build_prefix(artifact.tier, run_mode), sorting_code)
        for artifact in report.tiers
    ]

    run_prefix = build_prefix(DifficultyTier.NONE, run_mode)
    # 説明文の長い順で実行した場合、全体表は説明文の表と同じファイル名になる
    if sorting_code is not SortingCode.LONGEST_DESCRIPTION:
        targets.append((report.all_levels, DifficultyTier.NONE, run_prefix, sorting_code))

    targets.append((
        report.longest_descriptions,
        DifficultyTier.NONE,
        run_prefix,
        SortingCode.LONGEST_DESCRIPTION,
    ))
    targets.extend([
        (report.audio_info, DifficultyTier.NONE,
         f"{run_prefix} audio info", SortingCode.DEFAULT),
        (report.audio_info_expanded, DifficultyTier.NONE,
         f"{run_prefix} audio info expanded", SortingCode.DEFAULT),
        (report.builders_info, DifficultyTier.NONE,
         f"{run_prefix} builders info", SortingCode.DEFAULT),
    ])
    return targets


def run_destinations(
    base_dir: PathLike,
    run_mode: RunMode,
    sorting_code: SortingCode,
    report: RunReport,
) -> List[Tuple[ReportArtifact, Path]]:
    """
    RunReport の各成果物と出力先パスの組を返す。

    並び順が LONGEST_DESCRIPTION の場合、全体表は説明文の表と同じパスになるため
    全体表を除外し、説明文の表を採用する。

    Args:
        base_dir: レポートの出力ルート。
        run_mode: 実行モード。
        sorting_code: ティア別表と全体表に適用した並び順。
        report: generate_run の結果。

    Returns:
        (成果物, 出力先) のリスト。
    """
    return [
        (artifact, resolve_destination(base_dir, tier, prefix, code))
        for artifact, tier, prefix, code in _run_targets(run_mode, sorting_code, report)
    ]


def write_artifact(path: PathLike, text: str) -> None:
    """
    ファイルを上書きで書き込む。親ディレクトリが無ければ作成する。

    Raises:
        OSError: 書き込みに失敗した場合。
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(text)


def _write_targets(
    base_dir: PathLike,
    targets: List[Tuple[ReportArtifact, DifficultyTier, str, SortingCode]],
) -> WriteSummary:
    summary = WriteSummary()
    for artifact, tier, prefix, code in targets:
        path = destination_path(base_dir, tier, prefix, code)
        try:
            path = resolve_destination(base_dir, tier, prefix, code)
            write_artifact(path, artifact.text)
        except OSError:
            logger.exception("レポートの書き込みに失敗しました: %s", path)
            summary.failed.append(path)
            continue
        summary.written.append(path)
    return summary


def write_run(
    base_dir: PathLike,
    run_mode: RunMode,
    sorting_code: SortingCode,
    report: RunReport,
) -> WriteSummary:
    """
    1回分の実行結果を全て書き込む。

    1ファイルの書き込みに失敗してもログを出して残りのファイルを書き込む。

    Returns:
        WriteSummary。
    """
    return _write_targets(base_dir, _run_targets(run_mode, sorting_code, report))


def write_top_demons(base_dir: PathLike, artifact: ReportArtifact) -> WriteSummary:
    """上位 Demon 表を base_dir 直下に書き込む。"""
    if artifact.slot is not ReportSlot.TOP_DEMONS:
        raise ValueError(f"Not a top demons artifact: {artifact.slot!r}")

    prefix = build_prefix(DifficultyTier.NONE, None)
    return _write_targets(
        base_dir, [(artifact, DifficultyTier.NONE, prefix, SortingCode.DEFAULT)]
    )
