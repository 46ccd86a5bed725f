from __future__ import annotations

import httpx

from toolhost import __version__


async def web_fetch(url: str, *, max_bytes: int = 1_000_000, timeout_s: float = 15.0) -> dict:
    """
    Fetch a URL (GET) and return text content (best-effort) with size limits.
    """
    u = str(url or "").strip()
    if not (u.startswith("http://") or u.startswith("https://")):
        return {"ok": False, "error": "URL must start with http:// or https://", "url": u}

    max_bytes = max(1_000, int(max_bytes or 0))
    headers = {"User-Agent": f"toolhost/{__version__}"}
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout_s), follow_redirects=True, headers=headers) as client:
            r = await client.get(u)
    except httpx.HTTPError as e:
        return {"ok": False, "error": str(e), "url": u}

    content = r.content[:max_bytes]
    ctype = r.headers.get("content-type", "")
    if "text" in ctype or "json" in ctype or "xml" in ctype or ctype == "":
        text = content.decode(r.encoding or "utf-8", errors="replace")
    else:
        text = f"[non-text content-type: {ctype}] (bytes={len(content)})"
    return {
        "ok": True,
        "url": u,
        "status_code": int(r.status_code),
        "content_type": ctype,
        "text": text,
        "truncated": len(r.content) > len(content),
    }
