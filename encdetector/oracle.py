"""文字コード判定器(オラクル)の抽象と chardet 実装。

オラクルはバイト列を受け取り、候補エンコーディングを (名前, 信頼度 0-100) の
リストとして判定器自身の優先順で返す。検証ロジックはこの Protocol にのみ依存する。

提供:
- Candidate: 判定候補 1 件
- CharsetOracle: supported_encodings() / detect(data) を持つ Protocol
- ChardetOracle: chardet.detect_all を正規名に写像するアダプタ
- StaticOracle: 固定の判定結果を返す差し替え用実装
"""
from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Protocol, Sequence

import chardet


@dataclass(frozen=True)
class Candidate:
    name: str
    confidence: int  # 0-100

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "confidence": self.confidence}

    def __str__(self) -> str:
        return f"{self.name} ({self.confidence})"


class CharsetOracle(Protocol):
    def supported_encodings(self) -> FrozenSet[str]:
        ...

    def detect(self, data: bytes) -> List[Candidate]:
        ...


# chardet が返しうるエンコーディングの正規名
SUPPORTED_ENCODINGS: FrozenSet[str] = frozenset({
    "ASCII",
    "UTF-8",
    "UTF-16", "UTF-16BE", "UTF-16LE",
    "UTF-32", "UTF-32BE", "UTF-32LE",
    "Big5", "GB2312", "EUC-TW", "HZ-GB-2312", "ISO-2022-CN",
    "EUC-JP", "Shift_JIS", "CP932", "ISO-2022-JP",
    "EUC-KR", "CP949", "Johab", "ISO-2022-KR",
    "KOI8-R", "MacCyrillic", "IBM855", "IBM866",
    "ISO-8859-1", "ISO-8859-5", "ISO-8859-7", "ISO-8859-8", "ISO-8859-9",
    "windows-1251", "windows-1252", "windows-1253", "windows-1254", "windows-1255",
    "TIS-620", "MacRoman",
})

# 7bit 範囲が ASCII と一致しないもの
_NOT_ASCII_COMPATIBLE = frozenset({
    "UTF-16", "UTF-16BE", "UTF-16LE",
    "UTF-32", "UTF-32BE", "UTF-32LE",
    "HZ-GB-2312", "ISO-2022-CN", "ISO-2022-JP", "ISO-2022-KR",
})

# chardet 5 の detect_all が使う足切り (0.20) と同じ
MIN_CONFIDENCE = 20

_CANONICAL = {name.lower(): name for name in SUPPORTED_ENCODINGS}
_ALIASES = {
    "utf-8-sig": "UTF-8",
    "gb18030": "GB2312",
}

_BOMS = (
    (codecs.BOM_UTF32_BE, "UTF-32BE"),
    (codecs.BOM_UTF32_LE, "UTF-32LE"),
    (codecs.BOM_UTF16_BE, "UTF-16BE"),
    (codecs.BOM_UTF16_LE, "UTF-16LE"),
)


def canonical_name(name: str) -> str:
    """chardet の名前を正規名へ。未知の名前はそのまま返す。"""
    key = name.lower()
    if key in _ALIASES:
        return _ALIASES[key]
    return _CANONICAL.get(key, name)


def ascii_compatible_encodings() -> List[str]:
    """ASCII のみのバイト列を正しく表現できる正規名 (ASCII, UTF-8 を先頭に)。"""
    rest = sorted(SUPPORTED_ENCODINGS - _NOT_ASCII_COMPATIBLE - {"ASCII", "UTF-8"})
    return ["ASCII", "UTF-8", *rest]


def _bom_name(data: bytes, generic: str) -> Optional[str]:
    # UTF-32LE の BOM は UTF-16LE の BOM を前方に含むので順序が重要
    for bom, name in _BOMS:
        if data.startswith(bom) and name.startswith(generic):
            return name
    return None


class ChardetOracle:
    """chardet.detect_all を CharsetOracle として見せるアダプタ。

    - 空のバイト列には候補を返さない
    - 信頼度 0.0-1.0 を 0-100 の整数へ
    - min_confidence (既定 20 = chardet 5 の足切り 0.20) 未満の候補は捨てる
    - 名前を SUPPORTED_ENCODINGS の正規名へ
    - 'ascii' は ASCII 互換の全エンコーディングに同じ信頼度で展開
    - BOM 付き UTF-16/32 はバイト順付きの名前を先に出す
    - 重複は先勝ち (上位のものを残す)
    """

    def __init__(self, min_confidence: int = MIN_CONFIDENCE):
        self.min_confidence = min_confidence

    def supported_encodings(self) -> FrozenSet[str]:
        return SUPPORTED_ENCODINGS

    def detect(self, data: bytes) -> List[Candidate]:
        if not data:
            return []
        results = chardet.detect_all(data)
        candidates: List[Candidate] = []
        seen: set[str] = set()

        def add(name: str, confidence: int) -> None:
            if name.lower() in seen:
                return
            seen.add(name.lower())
            candidates.append(Candidate(name=name, confidence=confidence))

        for res in results:
            enc = res.get("encoding")
            if not enc:
                continue
            confidence = max(0, min(100, int(round((res.get("confidence") or 0.0) * 100))))
            if confidence < self.min_confidence:
                continue
            if enc.lower() == "ascii":
                for name in ascii_compatible_encodings():
                    add(name, confidence)
                continue
            name = canonical_name(enc)
            if name in ("UTF-16", "UTF-32"):
                specific = _bom_name(data, name)
                if specific:
                    add(specific, confidence)
            add(name, confidence)
        return candidates


class StaticOracle:
    """あらかじめ与えた判定結果を返すオラクル。

    results はバイト列ごとの判定結果、default は一致しない入力に対する結果。
    候補は (名前, 信頼度) のタプルでも Candidate でもよい。
    """

    def __init__(
        self,
        results: Mapping[bytes, Sequence] | None = None,
        default: Sequence = (),
        supported: Iterable[str] | None = None,
    ):
        self._results = {k: _to_candidates(v) for k, v in (results or {}).items()}
        self._default = _to_candidates(default)
        self._supported = frozenset(supported) if supported is not None else SUPPORTED_ENCODINGS
        self.calls = 0

    def supported_encodings(self) -> FrozenSet[str]:
        return self._supported

    def detect(self, data: bytes) -> List[Candidate]:
        self.calls += 1
        return list(self._results.get(data, self._default))


def _to_candidates(items: Sequence) -> List[Candidate]:
    out: List[Candidate] = []
    for item in items:
        if isinstance(item, Candidate):
            out.append(item)
        else:
            name, confidence = item
            out.append(Candidate(name=name, confidence=int(confidence)))
    return out


_default: ChardetOracle | None = None


def default_oracle() -> ChardetOracle:
    global _default
    if _default is None:
        _default = ChardetOracle()
    return _default


__all__ = [
    "Candidate",
    "CharsetOracle",
    "ChardetOracle",
    "StaticOracle",
    "SUPPORTED_ENCODINGS",
    "MIN_CONFIDENCE",
    "ascii_compatible_encodings",
    "canonical_name",
    "default_oracle",
]
