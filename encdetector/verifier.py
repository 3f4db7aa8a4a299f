"""高レベル API: ソースツリー全体のエンコーディング検証

- 対象ファイルの遅延列挙(グロブ指定)
- ファイルごとの二段階照合
- 読めないファイル・サブディレクトリは中断せず不一致として記録
- 並列実行(結果は列挙順にまとめる)と、ファイル間での中断
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

from .config import VerificationConfig, validate_config
from .file_scanner import iter_source_files
from .matcher import evaluate_file
from .oracle import Candidate, CharsetOracle, default_oracle

log = logging.getLogger(__name__)

UNREADABLE = "unreadable"


@dataclass(frozen=True)
class Mismatch:
    path: Path
    candidates: List[Candidate] = field(default_factory=list)
    # 読み込み失敗時のみ "unreadable: <理由>"
    error: str | None = None

    @property
    def unreadable(self) -> bool:
        return self.error is not None

    def describe(self) -> str:
        if self.error:
            return f"{self.path}: {self.error}"
        if not self.candidates:
            return f"{self.path}: no charset detected"
        return f"{self.path}: detected " + ", ".join(str(c) for c in self.candidates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "candidates": [c.to_dict() for c in self.candidates],
            "error": self.error,
        }


@dataclass
class VerificationReport:
    mismatches: List[Mismatch] = field(default_factory=list)
    checked: int = 0

    @property
    def overall_pass(self) -> bool:
        return not self.mismatches

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_pass": self.overall_pass,
            "checked": self.checked,
            "mismatches": [m.to_dict() for m in self.mismatches],
        }


def verify_file(path: Path, config: VerificationConfig, oracle: CharsetOracle) -> Mismatch | None:
    """1 ファイルを検証し、不一致なら Mismatch を返す。"""
    log.debug("%s", path)
    try:
        ok, candidates = evaluate_file(path, config.declared_encoding, config.confidence, oracle)
    except OSError as e:
        log.warning("File %s could not be read: %s", path, e)
        return Mismatch(path=path, error=f"{UNREADABLE}: {e}")
    if ok:
        return None
    log.warning("File %s does not match encoding %s", path, config.declared_encoding)
    return Mismatch(path=path, candidates=candidates)


def run(
    config: VerificationConfig,
    oracle: CharsetOracle | None = None,
    cancel: threading.Event | None = None,
) -> VerificationReport:
    """ソースツリーを検証してレポートを返す。

    config.skip が真ならファイルシステムに触れずに空の合格レポートを返す。
    設定の事前チェックは行わない(verify_tree を参照)。
    ルートを走査できない場合は OSError を送出する。ルート配下の読めない
    ディレクトリは UNREADABLE の Mismatch として記録し、走査を続ける。
    """
    report = VerificationReport()
    if config.skip:
        return report
    oracle = oracle or default_oracle()

    root = Path(config.source_root)
    log.info("scan dir %s", root)

    def unreadable_dir(path: Path, err: OSError) -> None:
        log.warning("Directory %s could not be read: %s", path, err)
        report.mismatches.append(Mismatch(path=path, error=f"{UNREADABLE}: {err}"))

    files = iter_source_files(root, config.includes, on_error=unreadable_dir)

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    def collect(result: Optional[Mismatch]) -> None:
        report.checked += 1
        if result is not None:
            report.mismatches.append(result)

    if config.jobs and config.jobs > 1:
        # 実行中のものは列挙順に回収し、同時に抱える件数は jobs*2 まで
        window = config.jobs * 2
        pending: Deque[Future] = deque()
        with ThreadPoolExecutor(max_workers=config.jobs) as ex:
            for path in files:
                if cancelled():
                    break
                pending.append(ex.submit(verify_file, path, config, oracle))
                if len(pending) >= window:
                    collect(pending.popleft().result())
            while pending:
                collect(pending.popleft().result())
    else:
        for path in files:
            if cancelled():
                break
            collect(verify_file(path, config, oracle))

    log.info("checked %d file(s), %d mismatch(es)", report.checked, len(report.mismatches))
    return report


verify = run


def verify_tree(
    config: VerificationConfig,
    oracle: CharsetOracle | None = None,
    cancel: threading.Event | None = None,
) -> VerificationReport:
    """設定を検査(ConfigError)してから run する。skip 時は検査もしない。"""
    if config.skip:
        return VerificationReport()
    oracle = oracle or default_oracle()
    validate_config(config, oracle)
    return run(config, oracle, cancel=cancel)


__all__ = [
    "Mismatch",
    "VerificationReport",
    "UNREADABLE",
    "verify_file",
    "run",
    "verify",
    "verify_tree",
]
