from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Any, Dict, List

from toolhost.runtime.tools.filesystem import resolve_under, within_root


def _base(root: Path, base_dir: str) -> Path:
    p = resolve_under(root, base_dir)
    # Force to root for safety
    return p if within_root(p, root) else root


async def fs_glob(root: Path, *, pattern: str, base_dir: str = ".", limit: int = 200) -> dict:
    """
    Pattern uses fnmatch semantics (e.g. **/*.py), matched against paths relative to the workspace.
    """
    pat = str(pattern or "").strip()
    if not pat:
        return {"ok": False, "error": "pattern is required"}
    base = _base(root, base_dir)
    limit = max(1, int(limit or 200))
    matches: List[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            rel = (Path(dirpath) / name).resolve().relative_to(root).as_posix()
            if fnmatch.fnmatch(rel, pat) or fnmatch.fnmatch(name, pat):
                matches.append(rel)
                if len(matches) >= limit:
                    return {"ok": True, "matches": matches, "truncated": True}
    return {"ok": True, "matches": matches, "truncated": False}


async def fs_grep(root: Path, *, query: str, base_dir: str = ".", limit: int = 50, max_file_bytes: int = 500_000) -> dict:
    """
    Case-insensitive substring search. Returns file+line snippets.
    """
    q = str(query or "").strip()
    if not q:
        return {"ok": False, "error": "query is required"}
    ql = q.lower()
    base = _base(root, base_dir)
    limit = max(1, int(limit or 50))
    results: List[Dict[str, Any]] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            p = (Path(dirpath) / name).resolve()
            if not within_root(p, root):
                continue
            try:
                if p.stat().st_size > int(max_file_bytes):
                    continue
                text = p.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            for i, line in enumerate(text.splitlines(), start=1):
                if ql in line.lower():
                    results.append({"path": p.relative_to(root).as_posix(), "line": i, "text": line.strip()[:400]})
                    if len(results) >= limit:
                        return {"ok": True, "query": q, "results": results, "truncated": True}
    return {"ok": True, "query": q, "results": results, "truncated": False}
