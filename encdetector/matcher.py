"""1 ファイル分の判定結果と宣言エンコーディングを照合する。

二段階の照合:
1. 信頼度が閾値以上の候補のみで照合する。
   - 宣言と一致する候補があれば MATCH (一致)
   - 閾値以上の候補はあるが宣言と違う → NO_CONFIDENTIAL_MATCH (不一致、フォールバックしない)
   - 閾値以上の候補が無い → NONE
2. NONE のときだけ、閾値 0 (全候補) で照合し直す。

候補の順序はオラクルの順位のまま使い、並べ替えない。
"""
from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable, List, Tuple

from .oracle import Candidate, CharsetOracle

log = logging.getLogger(__name__)


class MatchOutcome(enum.Enum):
    # 閾値以上の候補に宣言エンコーディングがある
    MATCH = "match"
    # 閾値以上の候補はあるが、宣言エンコーディングではない
    NO_CONFIDENTIAL_MATCH = "no-confidential-match"
    # 閾値以上の候補が無い
    NONE = "none"


def verify_matches(candidates: Iterable[Candidate], declared: str, threshold: int) -> MatchOutcome:
    confidential = False
    wanted = declared.lower()
    for cand in candidates:
        if cand.confidence < threshold:
            continue
        log.debug("Matched encoding: %s -- confidence: %d", cand.name, cand.confidence)
        if cand.name.lower() == wanted:
            return MatchOutcome.MATCH
        confidential = True
    return MatchOutcome.NO_CONFIDENTIAL_MATCH if confidential else MatchOutcome.NONE


def match_candidates(candidates: List[Candidate], declared: str, threshold: int, label: str = "<bytes>") -> bool:
    """判定済みの候補列に二段階の照合を適用する。"""
    if not candidates:
        return False

    outcome = verify_matches(candidates, declared, threshold)
    if outcome is MatchOutcome.MATCH:
        return True
    if outcome is MatchOutcome.NO_CONFIDENTIAL_MATCH:
        return False

    log.debug(
        "for file %s we are unable to detect a good match (confidence >= %d) - now try also poor matches",
        label, threshold,
    )
    return verify_matches(candidates, declared, 0) is MatchOutcome.MATCH


def evaluate(data: bytes | BinaryIO, declared: str, threshold: int, oracle: CharsetOracle) -> bool:
    """バイト列(またはバイナリストリーム)が宣言エンコーディングと整合するか。

    ストリームの読み込みエラーは OSError としてそのまま送出する。
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        data = data.read()
    return match_candidates(oracle.detect(bytes(data)), declared, threshold)


def evaluate_file(
    path: str | os.PathLike[str],
    declared: str,
    threshold: int,
    oracle: CharsetOracle,
) -> Tuple[bool, List[Candidate]]:
    """ファイルを照合し、(結果, 検討した候補) を返す。ハンドルは必ず閉じる。"""
    with Path(path).open("rb") as f:
        candidates = oracle.detect(f.read())
        return match_candidates(candidates, declared, threshold, label=str(path)), candidates


__all__ = ["MatchOutcome", "verify_matches", "match_candidates", "evaluate", "evaluate_file"]
