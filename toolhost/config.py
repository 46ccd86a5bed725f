from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger("toolhost.config")


def config_path() -> str:
    return os.getenv("TOOLHOST_CONFIG", "") or "toolhost.json"


def _read(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable config %s: %s", p, e)
        return {}
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=1)
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    return _read(path or config_path())



def _get(cfg: Dict[str, Any], *path: str, default: Any = None) -> Any:
    cur: Any = cfg
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def default_profile() -> str:
    cfg = load_config()
    return str(_get(cfg, "runtime", "profile", default="general") or "general")


def default_provider() -> str:
    cfg = load_config()
    return str(_get(cfg, "llm", "provider", default="openai") or "openai")


def default_model() -> str:
    cfg = load_config()
    return str(_get(cfg, "llm", "model_name", default="gpt-4o-mini") or "gpt-4o-mini")


def llm_temperature() -> Optional[float]:
    cfg = load_config()
    v = _get(cfg, "llm", "temperature", default=None)
    if v is None:
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def llm_max_tokens() -> Optional[int]:
    cfg = load_config()
    v = _get(cfg, "llm", "max_tokens", default=None)
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def toolhost_home(env: Optional[Mapping[str, Optional[str]]] = None) -> str:
    """
    Per-user data dir: $TOOLHOST_HOME (context env first, then process env), else ~/.toolhost.
    """
    for source in (env or {}, os.environ):
        v = source.get("TOOLHOST_HOME")
        if v and str(v).strip():
            return str(Path(str(v).strip()).expanduser().resolve())
    return str(Path.home() / ".toolhost")


def mcp_request_timeout_s() -> float:
    cfg = load_config()
    try:
        return float(_get(cfg, "mcp", "request_timeout_s", default=60))
    except (TypeError, ValueError):
        return 60.0


def log_level() -> str:
    cfg = load_config()
    return str(_get(cfg, "logs", "level", default="WARNING") or "WARNING").upper()


def disabled_plugins() -> List[str]:
    cfg = load_config()
    v = _get(cfg, "plugins", "disabled", default=[])
    if isinstance(v, list):
        return [str(x) for x in v]
    return []
