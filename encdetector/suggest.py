from __future__ import annotations
"""
未知のエンコーディング名に対する「もしかして」候補
- rapidfuzz による類似度で、オラクルの正規名から最も近いものを提示
- オプション機能: 依存が未導入なら候補なし(None)を返す
"""
from typing import Iterable, Optional

try:
    from rapidfuzz import process, fuzz, utils  # type: ignore
    _RF_AVAILABLE = True
except Exception:
    process = None  # type: ignore
    fuzz = None  # type: ignore
    utils = None  # type: ignore
    _RF_AVAILABLE = False


def is_available() -> bool:
    return _RF_AVAILABLE


def closest_encoding(name: str, known: Iterable[str], threshold: int = 80) -> Optional[str]:
    if not _RF_AVAILABLE or not name.strip():
        return None
    choices = sorted(known)
    if not choices:
        return None
    # 大文字小文字違いは完全一致扱い
    for c in choices:
        if c.lower() == name.lower():
            return c
    try:
        cand = process.extractOne(name, choices, scorer=fuzz.WRatio, processor=utils.default_process)
    except Exception:
        cand = None
    if not cand:
        return None
    best, score, _ = cand
    if score >= threshold:
        return best
    return None


__all__ = ["is_available", "closest_encoding"]
