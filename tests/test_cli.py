import json
import subprocess
import sys
from pathlib import Path

from encdetector.cli import SUMMARY_MESSAGE, main

PKG = 'encdetector'
ROOT = Path(__file__).resolve().parents[1]

GERMAN = "# Grüße aus München: Äpfel, Öl, Übermut, süß, schön, größer.\n" * 10


def _run_cli(args):
    exe = [sys.executable, '-m', PKG + '.cli']
    cp = subprocess.run(exe + args, cwd=str(ROOT), capture_output=True, text=True)
    return cp.returncode, cp.stdout, cp.stderr


def _tree(tmp_path, data: bytes):
    src = tmp_path / 'src'
    src.mkdir()
    (src / 'mod.py').write_bytes(data)
    return src


def test_cli_ascii_tree_passes(tmp_path):
    src = _tree(tmp_path, b"print('hello')\n")
    code, out, err = _run_cli([str(src), '--encoding', 'UTF-8'])
    assert code == 0, err
    assert out.startswith('OK: 1 file(s)')


def test_cli_mismatch_fails(tmp_path):
    src = _tree(tmp_path, GERMAN.encode('latin-1'))
    code, out, err = _run_cli([str(src), '--encoding', 'UTF-8'])
    assert code == 1
    assert 'mod.py' in out
    assert SUMMARY_MESSAGE in err


def test_cli_warn_only(tmp_path):
    src = _tree(tmp_path, GERMAN.encode('latin-1'))
    code, out, err = _run_cli([str(src), '--encoding', 'UTF-8', '--warn-only'])
    assert code == 0
    assert '[warn]' in err and SUMMARY_MESSAGE in err


def test_cli_json(tmp_path):
    src = _tree(tmp_path, GERMAN.encode('utf-8'))
    code, out, err = _run_cli([str(src), '--encoding', 'UTF-8', '--json'])
    assert code == 0, err
    data = json.loads(out)
    assert data == {"overall_pass": True, "checked": 1, "mismatches": []}


def test_cli_unknown_encoding(tmp_path, capsys):
    src = _tree(tmp_path, b"x = 1\n")
    assert main([str(src), '--encoding', 'BOGUS-ENC']) == 2
    assert 'Unknown encoding BOGUS-ENC' in capsys.readouterr().err


def test_cli_bad_source_root(tmp_path, capsys):
    assert main([str(tmp_path / 'nope'), '--encoding', 'UTF-8']) == 2
    assert 'source directory' in capsys.readouterr().err


def test_cli_skip(tmp_path, capsys):
    # 存在しないルートでもスキップなら成功
    assert main([str(tmp_path / 'nope'), '--skip']) == 0
    assert 'Skip charset detection' in capsys.readouterr().err


def test_cli_config_file_and_override(tmp_path, capsys):
    src = _tree(tmp_path, GERMAN.encode('latin-1'))
    cfg = tmp_path / 'pyproject.toml'
    cfg.write_text(
        '[tool.encdetector]\nsourceRoot = "src"\nsourceEncoding = "UTF-8"\nfailOnMismatch = true\n',
        encoding='utf-8',
    )
    assert main(['--config', str(cfg)]) == 1
    capsys.readouterr()
    # CLI引数が設定ファイルより優先
    assert main(['--config', str(cfg), '--warn-only']) == 0
    assert main(['--config', str(cfg), '--include', '*.txt']) == 0
    out = capsys.readouterr().out
    assert 'OK: 0 file(s)' in out
    assert src.is_dir()


def test_cli_missing_config(tmp_path, capsys):
    assert main(['--config', str(tmp_path / 'missing.toml')]) == 2
    assert 'failed to load config' in capsys.readouterr().err


def test_cli_list_encodings(capsys):
    assert main(['--list-encodings']) == 0
    names = capsys.readouterr().out.split()
    assert 'UTF-8' in names and 'ISO-8859-1' in names


def test_cli_no_skip_overrides_config(tmp_path, capsys):
    _tree(tmp_path, b"x = 1\n")
    cfg = tmp_path / 'encdetector.json'
    cfg.write_text(json.dumps({"sourceRoot": "src", "sourceEncoding": "UTF-8", "skip": True}), encoding='utf-8')
    assert main(['--config', str(cfg)]) == 0
    assert 'Skip charset detection' in capsys.readouterr().err
    assert main(['--config', str(cfg), '--no-skip']) == 0
    captured = capsys.readouterr()
    assert 'Skip charset detection' not in captured.err
    assert 'OK: 1 file(s)' in captured.out
