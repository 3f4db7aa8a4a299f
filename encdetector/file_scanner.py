"""ソースツリーの走査ユーティリティ。

- ファイル名をグロブ(fnmatch)で絞り込み、再帰的に遅延列挙する。
- ルートが無い/ディレクトリでない/読めない場合は OSError。
- ルート配下の読めないディレクトリは on_error に渡して走査を続ける。
  (on_error 未指定なら読み飛ばす)
"""
from __future__ import annotations
import fnmatch
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

def matches_any(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(name, pat) for pat in patterns)

def iter_source_files(
    root: str | os.PathLike[str],
    includes: Iterable[str] = ("*.py",),
    on_error: Optional[Callable[[Path, OSError], None]] = None,
) -> Iterator[Path]:
    patterns = tuple(includes)
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"source root not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"source root is not a directory: {root}")
    top = os.fspath(root)

    def _walk_error(err: OSError) -> None:
        failed = err.filename if err.filename is not None else top
        if os.fspath(failed) == top:
            raise err
        if on_error is not None:
            on_error(Path(os.fspath(failed)), err)

    for dirpath, dirs, files in os.walk(top, onerror=_walk_error):
        dirs.sort()
        for f in sorted(files):
            if matches_any(f, patterns):
                path = Path(dirpath) / f
                if path.is_file():
                    yield path

__all__ = ["iter_source_files", "matches_any"]
