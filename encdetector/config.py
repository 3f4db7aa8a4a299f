"""検証設定と、その事前チェック・読み込み。

設定ファイル形式:

TOML (pyproject.toml など):
[tool.encdetector]
sourceRoot = "src"
sourceEncoding = "UTF-8"
confidence = 70
failOnMismatch = true
skip = false
includes = ["*.py", "*.pyi"]
jobs = 4

YAML / JSON: 上記テーブルの中身をトップレベルに置いたマッピング。
"""
from __future__ import annotations

import enum
import json
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .oracle import CharsetOracle
from .suggest import closest_encoding

try:
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None  # YAML未インストール時はTOML/JSONのみ

DEFAULT_CONFIDENCE = 70
DEFAULT_INCLUDES: Tuple[str, ...] = ("*.py",)


@dataclass(frozen=True)
class VerificationConfig:
    source_root: Path
    declared_encoding: str
    confidence: int = DEFAULT_CONFIDENCE
    fail_on_mismatch: bool = True
    skip: bool = False
    includes: Tuple[str, ...] = field(default=DEFAULT_INCLUDES)
    jobs: int = 1

    def with_overrides(self, **changes: Any) -> "VerificationConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


class ConfigErrorKind(enum.Enum):
    BAD_SOURCE_ROOT = "bad-source-root"
    MISSING_ENCODING = "missing-encoding"
    UNKNOWN_ENCODING = "unknown-encoding"
    THRESHOLD_OUT_OF_RANGE = "threshold-out-of-range"


class ConfigError(ValueError):
    def __init__(self, kind: ConfigErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


def validate_config(config: VerificationConfig, oracle: CharsetOracle) -> None:
    """走査前に設定を検査する。最初に見つかった問題で ConfigError を送出。

    1. source_root が存在し、ディレクトリで、読み取り可能
    2. declared_encoding が空でない
    3. declared_encoding がオラクルの正規名に含まれる(大文字小文字を区別)
    4. confidence が 0..100
    """
    root = config.source_root
    if root is None or not Path(root).is_dir() or not os.access(root, os.R_OK):
        raise ConfigError(
            ConfigErrorKind.BAD_SOURCE_ROOT,
            f"Please check the source directory {root}",
        )

    encoding = config.declared_encoding
    if encoding is None or not encoding.strip():
        raise ConfigError(
            ConfigErrorKind.MISSING_ENCODING,
            "Source encoding is not defined! Set 'sourceEncoding' or pass --encoding.",
        )

    known = oracle.supported_encodings()
    if encoding not in known:
        message = f"Unknown encoding {encoding}"
        hint = closest_encoding(encoding, known)
        if hint:
            message += f" (did you mean {hint}?)"
        raise ConfigError(ConfigErrorKind.UNKNOWN_ENCODING, message)

    if config.confidence < 0 or config.confidence > 100:
        raise ConfigError(
            ConfigErrorKind.THRESHOLD_OUT_OF_RANGE,
            f"Confidence should be in the range of 0-100 (current define is {config.confidence})!",
        )


def load_config_file(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """TOML/YAML/JSON の設定ファイルを読み込み、キー→値の辞書を返す。

    TOML は [tool.encdetector] テーブルのみを見る(無ければ空辞書)。
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(str(path))
    suffix = p.suffix.lower()
    if suffix == ".toml":
        with p.open("rb") as f:
            data = tomllib.load(f)
        tool = data.get("tool", {}) if isinstance(data, dict) else {}
        section = tool.get("encdetector", {}) if isinstance(tool, dict) else {}
        if not isinstance(section, dict):
            raise ValueError(f"[tool.encdetector] must be a table: {path}")
        return dict(section)
    text = p.read_text(encoding="utf-8-sig")
    if suffix in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAMLがインストールされていないためYAMLは読み込めません。'pip install PyYAML' を実行してください")
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("設定ファイルはマッピングである必要があります")
    return data


def _as_bool(value: Any, key: str) -> bool:
    # YAML/JSON で文字列として書かれた "true"/"false" も受け付ける
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"{key} must be true or false, got {value!r}")


def config_from_mapping(values: Mapping[str, Any], base_dir: Path | None = None) -> VerificationConfig:
    """設定ファイル由来の辞書から VerificationConfig を組み立てる。

    sourceRoot が相対パスなら base_dir (設定ファイルの場所) から解決する。
    """
    root = Path(str(values.get("sourceRoot", ".")))
    if base_dir is not None and not root.is_absolute():
        root = base_dir / root
    includes = values.get("includes", list(DEFAULT_INCLUDES))
    if isinstance(includes, str):
        includes = [includes]
    try:
        return VerificationConfig(
            source_root=root,
            declared_encoding=str(values.get("sourceEncoding") or ""),
            confidence=int(values.get("confidence", DEFAULT_CONFIDENCE)),
            fail_on_mismatch=_as_bool(values.get("failOnMismatch", True), "failOnMismatch"),
            skip=_as_bool(values.get("skip", False), "skip"),
            includes=tuple(str(x) for x in includes),
            jobs=int(values.get("jobs", 1)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration value: {e}") from e


__all__ = [
    "VerificationConfig",
    "ConfigError",
    "ConfigErrorKind",
    "validate_config",
    "load_config_file",
    "config_from_mapping",
    "DEFAULT_CONFIDENCE",
    "DEFAULT_INCLUDES",
]
