from __future__ import annotations

from pathlib import Path


def resolve_under(root: Path, path: str) -> Path:
    p = Path(path) if path else root
    if not p.is_absolute():
        p = root / p
    return p.resolve()


def within_root(p: Path, root: Path) -> bool:
    try:
        p.relative_to(root)
        return True
    except ValueError:
        return False


async def filesystem_read(root: Path, path: str) -> dict:
    p = resolve_under(root, path)
    if not within_root(p, root):
        return {"ok": False, "error": f"Access denied (outside workspace): {p}", "path": str(p)}
    try:
        return {"ok": True, "path": str(p), "content": p.read_text(encoding="utf-8")}
    except (OSError, UnicodeDecodeError) as e:
        return {"ok": False, "error": str(e), "path": str(p)}


async def filesystem_list(root: Path, path: str) -> dict:
    p = resolve_under(root, path)
    if not within_root(p, root):
        return {"ok": False, "error": f"Access denied (outside workspace): {p}", "path": str(p)}
    if not p.exists():
        return {"ok": False, "error": "Not found", "path": str(p)}
    if not p.is_dir():
        return {"ok": False, "error": "Not a directory", "path": str(p)}
    try:
        entries = [{"name": c.name, "is_dir": c.is_dir()} for c in sorted(p.iterdir())]
    except OSError as e:
        return {"ok": False, "error": str(e), "path": str(p)}
    return {"ok": True, "path": str(p), "entries": entries}


async def filesystem_write(root: Path, path: str, content: str, *, append: bool = False, create_parents: bool = True) -> dict:
    p = resolve_under(root, path)
    if not within_root(p, root):
        return {"ok": False, "error": f"Access denied (outside workspace): {p}", "path": str(p)}
    text = str(content)
    try:
        if create_parents:
            p.parent.mkdir(parents=True, exist_ok=True)
        if append:
            with p.open("a", encoding="utf-8") as f:
                f.write(text)
        else:
            p.write_text(text, encoding="utf-8")
    except OSError as e:
        return {"ok": False, "error": str(e), "path": str(p)}
    return {"ok": True, "path": str(p), "bytes": len(text.encode("utf-8")), "append": bool(append)}
