from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import (
    ConfigError,
    VerificationConfig,
    config_from_mapping,
    load_config_file,
)
from .oracle import default_oracle
from .verifier import VerificationReport, verify_tree

SUMMARY_MESSAGE = "We detect encoding errors on various files - see log!"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="encdetector",
        description="ソースファイルの実際の文字コードが宣言エンコーディングと一致するか検証します"
    )
    p.add_argument("path", nargs="?", help="走査するソースディレクトリ (既定: 設定の sourceRoot または カレント)")
    p.add_argument("--encoding", "-e", help="宣言エンコーディング (例: UTF-8)")
    p.add_argument("--confidence", "-c", type=int, help="確度の閾値 0-100 (既定: 70)")
    p.add_argument("--include", action="append", metavar="GLOB", help="対象ファイル名のグロブ (複数指定は繰り返し, 既定: *.py)")
    p.add_argument("--fail-on-mismatch", dest="fail_on_mismatch", action="store_true", default=None, help="不一致があれば終了コード1 (既定)")
    p.add_argument("--warn-only", dest="fail_on_mismatch", action="store_false", help="不一致は警告のみ(終了コード0)")
    p.add_argument("--skip", dest="skip", action="store_true", default=None, help="検証をスキップ")
    p.add_argument("--no-skip", dest="skip", action="store_false", help="設定ファイルの skip を無効化して検証する")
    p.add_argument("--jobs", type=int, help="並列実行のワーカー数")
    p.add_argument("--config", help="設定ファイル(TOML: pyproject.toml の [tool.encdetector] / YAML / JSON)")
    p.add_argument("--json", action="store_true", help="JSONで出力")
    p.add_argument("--list-encodings", action="store_true", help="指定可能なエンコーディング名を表示して終了")
    p.add_argument("-v", "--verbose", action="count", default=0, help="ログを詳しく (-v: INFO, -vv: DEBUG)")
    return p


def _setup_logging(verbosity: int) -> None:
    level = logging.ERROR
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s", stream=sys.stderr)


def resolve_config(args: argparse.Namespace) -> VerificationConfig:
    """設定ファイル → CLI引数 の順に上書きして VerificationConfig を作る。"""
    values = {}
    base_dir = None
    if args.config:
        cfg_path = Path(args.config)
        values = load_config_file(cfg_path)
        base_dir = cfg_path.resolve().parent
    config = config_from_mapping(values, base_dir=base_dir)
    return config.with_overrides(
        source_root=Path(args.path) if args.path else None,
        declared_encoding=args.encoding,
        confidence=args.confidence,
        fail_on_mismatch=args.fail_on_mismatch,
        skip=args.skip,
        includes=tuple(args.include) if args.include else None,
        jobs=args.jobs,
    )


def _print_report(report: VerificationReport, config: VerificationConfig) -> None:
    if report.overall_pass:
        print(f"OK: {report.checked} file(s) match encoding {config.declared_encoding}")
        return
    for m in report.mismatches:
        print(m.describe())
    print(f"Total: {len(report.mismatches)} mismatch(es) in {report.checked} file(s)")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    oracle = default_oracle()

    if args.list_encodings:
        for name in sorted(oracle.supported_encodings(), key=str.lower):
            print(name)
        return 0

    try:
        config = resolve_config(args)
    except (OSError, ValueError, RuntimeError) as e:
        print(f"[error] failed to load config {args.config or ''}: {e}", file=sys.stderr)
        return 2

    if config.skip:
        print("[warn] Skip charset detection of sources ...", file=sys.stderr)
        if args.json:
            print(json.dumps(VerificationReport().to_dict(), ensure_ascii=False, indent=2))
        return 0

    try:
        report = verify_tree(config, oracle)
    except ConfigError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"[error] Error on detect encoding! {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_report(report, config)

    if not report.overall_pass:
        if config.fail_on_mismatch:
            print(f"[error] {SUMMARY_MESSAGE}", file=sys.stderr)
            return 1
        print(f"[warn] {SUMMARY_MESSAGE}", file=sys.stderr)
    return 0

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
