"""encdetector
ソースツリーの宣言エンコーディングを、実際のバイト列から検証するライブラリ。

主な提供機能:
- chardet による候補エンコーディング(信頼度付き)の取得
- 信頼度閾値による二段階照合 (確かな候補 → 閾値0 へのフォールバック)
- ディレクトリ再帰走査と不一致レポート
- CLI インターフェース
"""
from .config import ConfigError, ConfigErrorKind, VerificationConfig, validate_config
from .matcher import MatchOutcome, evaluate
from .oracle import Candidate, CharsetOracle, ChardetOracle, StaticOracle
from .verifier import Mismatch, VerificationReport, run, verify, verify_tree

__all__ = [
    "Candidate",
    "CharsetOracle",
    "ChardetOracle",
    "StaticOracle",
    "ConfigError",
    "ConfigErrorKind",
    "VerificationConfig",
    "validate_config",
    "MatchOutcome",
    "evaluate",
    "Mismatch",
    "VerificationReport",
    "run",
    "verify",
    "verify_tree",
]

__version__ = "0.1.0"
