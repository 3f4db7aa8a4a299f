import codecs

import chardet

from encdetector.matcher import evaluate
from encdetector.oracle import (
    MIN_CONFIDENCE,
    SUPPORTED_ENCODINGS,
    Candidate,
    ChardetOracle,
    StaticOracle,
    ascii_compatible_encodings,
    canonical_name,
)

GERMAN = "Grüße aus München: Äpfel, Öl, Übermut, süß, schön, größer, Bäume.\n" * 20


def test_canonical_names():
    assert canonical_name("utf-8") == "UTF-8"
    assert canonical_name("UTF-8-SIG") == "UTF-8"
    assert canonical_name("SHIFT_JIS") == "Shift_JIS"
    assert canonical_name("Windows-1252") == "windows-1252"
    assert canonical_name("x-unknown") == "x-unknown"


def test_ascii_compatible_encodings():
    names = ascii_compatible_encodings()
    assert names[:2] == ["ASCII", "UTF-8"]
    assert "ISO-8859-1" in names
    assert "UTF-16LE" not in names
    assert set(names) <= SUPPORTED_ENCODINGS


def test_empty_input_has_no_candidates():
    assert ChardetOracle().detect(b"") == []


def test_pure_ascii_expands():
    candidates = ChardetOracle().detect(b"print('hello world')\n" * 10)
    names = [c.name for c in candidates]
    assert names[:2] == ["ASCII", "UTF-8"]
    assert "ISO-8859-1" in names
    assert all(c.confidence == 100 for c in candidates)


def test_utf8_text_matches():
    data = GERMAN.encode("utf-8")
    oracle = ChardetOracle()
    assert any(c.name == "UTF-8" and c.confidence >= 90 for c in oracle.detect(data))
    assert evaluate(data, "UTF-8", 70, oracle)


def test_utf8_bom_is_utf8():
    data = codecs.BOM_UTF8 + GERMAN.encode("utf-8")
    candidates = ChardetOracle().detect(data)
    assert candidates[0] == Candidate("UTF-8", 100)


def test_utf16_bom_names_byte_order():
    data = codecs.BOM_UTF16_BE + GERMAN.encode("utf-16-be")
    names = [c.name for c in ChardetOracle().detect(data)]
    assert names[:2] == ["UTF-16BE", "UTF-16"]
    assert evaluate(data, "UTF-16BE", 50, ChardetOracle())


def test_latin1_is_not_utf8():
    data = GERMAN.encode("latin-1")
    assert not evaluate(data, "UTF-8", 70, ChardetOracle())


def test_static_oracle():
    oracle = StaticOracle(results={b"x": [("UTF-8", 10)]}, default=[Candidate("ASCII", 5)])
    assert oracle.detect(b"x") == [Candidate("UTF-8", 10)]
    assert oracle.detect(b"y") == [Candidate("ASCII", 5)]
    assert oracle.calls == 2
    assert oracle.supported_encodings() == SUPPORTED_ENCODINGS


LATIN_SPARSE = "Die Datei wird geprüft und danach übernommen, alles schön.\n" * 20


def test_latin1_is_not_cyrillic():
    data = LATIN_SPARSE.encode("latin-1")
    oracle = ChardetOracle()
    assert all(c.confidence >= MIN_CONFIDENCE for c in oracle.detect(data))
    assert not evaluate(data, "ISO-8859-5", 70, oracle)
    assert not evaluate(data, "KOI8-R", 70, oracle)


def test_low_confidence_results_are_dropped(monkeypatch):
    # 足切り前の全プローバを返す chardet でも、弱い候補は残らない
    noisy = [
        {"encoding": "ISO-8859-1", "confidence": 0.05, "language": ""},
        {"encoding": "ISO-8859-5", "confidence": 0.04, "language": "Russian"},
        {"encoding": "KOI8-R", "confidence": 0.03, "language": "Russian"},
        {"encoding": "utf-8", "confidence": 0.10, "language": ""},
    ]
    monkeypatch.setattr(chardet, "detect_all", lambda data: list(noisy))
    oracle = ChardetOracle()
    assert oracle.detect(b"\xfc\xdf") == []
    assert not evaluate(b"\xfc\xdf", "ISO-8859-5", 70, oracle)
    assert not evaluate(b"\xfc\xdf", "UTF-8", 70, oracle)


def test_empty_input_skips_chardet(monkeypatch):
    monkeypatch.setattr(chardet, "detect_all", lambda data: [{"encoding": "utf-8", "confidence": 0.10}])
    assert ChardetOracle().detect(b"") == []
    assert not evaluate(b"", "UTF-8", 70, ChardetOracle())


def test_min_confidence_is_configurable(monkeypatch):
    monkeypatch.setattr(chardet, "detect_all", lambda data: [{"encoding": "utf-8", "confidence": 0.10}])
    assert ChardetOracle(min_confidence=0).detect(b"x") == [Candidate("UTF-8", 10)]
