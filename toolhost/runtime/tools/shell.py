from __future__ import annotations

import asyncio
from typing import Mapping, Optional

MAX_OUTPUT_CHARS = 100_000


def _clip(raw: Optional[bytes], limit: int) -> str:
    text = (raw or b"").decode("utf-8", errors="replace")
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... [truncated {len(text) - limit} chars]"


async def shell_run(
    command: str,
    *,
    cwd: str,
    env: Optional[Mapping[str, str]] = None,
    timeout_s: float = 60,
    max_output_chars: int = MAX_OUTPUT_CHARS,
) -> dict:
    """
    Run `command` through the shell with the workspace as cwd.

    Approval and sandboxing belong to whoever exposes the tool; this only runs it.
    """
    if not str(command or "").strip():
        return {"ok": False, "error": "command is required"}
    proc = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        return {"ok": False, "error": f"Timeout after {timeout_s}s"}
    return {
        "ok": proc.returncode == 0,
        "returncode": proc.returncode,
        "stdout": _clip(out, max_output_chars),
        "stderr": _clip(err, max_output_chars),
    }
