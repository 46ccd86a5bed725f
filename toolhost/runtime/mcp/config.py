from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from toolhost import config
from toolhost.errors import McpConfigError

logger = logging.getLogger("toolhost.mcp")

DEFAULT_FILES = (".mcp.json", os.path.join(".toolhost", "mcp.json"))
DEFAULT_DIRECTORIES = (os.path.join(".toolhost", "mcp.d"),)
TRANSPORTS = {"stdio": "stdio", "http": "http", "streamable-http": "http"}

_TOKEN = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class McpServerConfig:
    id: str
    source: str
    transport: str = "stdio"
    command: str = ""
    args: Tuple[str, ...] = ()
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    description: Optional[str] = None

    def label(self) -> str:
        return self.description or (self.url if self.transport == "http" else self.command)


def sanitize_id(value: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9_-]", "-", str(value or "").strip())
    s = re.sub(r"-+", "-", s).strip("-")
    return s.lower()


def discover_config_files(working_dir: str, env: Mapping[str, Optional[str]]) -> List[Path]:
    """
    Candidate files in precedence order (later files override earlier ones by server id).
    """
    files: List[Path] = []

    def add(p: Path) -> None:
        if p not in files:
            files.append(p)

    # Most specific last: user home, toolhost home, workspace, explicit override.
    roots = [Path.home(), Path(config.toolhost_home(env)), Path(working_dir)]
    for root in roots:
        for name in DEFAULT_FILES:
            candidate = (root / name).resolve()
            if candidate.is_file():
                add(candidate)
        for dir_name in DEFAULT_DIRECTORIES:
            directory = (root / dir_name).resolve()
            if directory.is_dir():
                for entry in sorted(directory.glob("*.json")):
                    add(entry.resolve())

    override = env.get("TOOLHOST_MCP_CONFIG") or os.environ.get("TOOLHOST_MCP_CONFIG")
    if override:
        for part in re.split(r"[:,;]", override):
            if part.strip():
                add(Path(part.strip()).expanduser().resolve())
    return files


def parse_config_file(path: Path) -> List[Dict[str, Any]]:
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    parsed = json.loads(text)
    if isinstance(parsed, dict) and isinstance(parsed.get("mcpServers"), dict):
        parsed = parsed["mcpServers"]
    if isinstance(parsed, list):
        return [dict(e) for e in parsed if isinstance(e, dict)]
    if isinstance(parsed, dict):
        return [{**v, "id": k} for k, v in parsed.items() if isinstance(v, dict)]
    return []


class _Expander:
    def __init__(self, *, working_dir: str, env: Mapping[str, Optional[str]], source: Path):
        workspace = str(Path(working_dir).resolve())
        self.env = env
        self.replacements = {
            "WORKSPACE_ROOT": workspace,
            "PROJECT_DIR": workspace,
            "TOOLHOST_HOME": config.toolhost_home(env),
            "HOME": str(Path.home()),
            "MCP_CONFIG_DIR": str(source.parent),
        }

    def lookup(self, key: str) -> Optional[str]:
        if key in self.replacements:
            return self.replacements[key]
        for source in (self.env, os.environ):
            v = source.get(key)
            if isinstance(v, str) and v.strip():
                return v.strip()
        return None

    def expand(self, value: str) -> Tuple[str, List[str]]:
        """
        Returns (expanded, unresolved_tokens).
        """
        missing: List[str] = []

        def sub(m: "re.Match[str]") -> str:
            key = m.group(1).strip()
            v = self.lookup(key)
            if v is None:
                missing.append(key)
                return ""
            return v

        return _TOKEN.sub(sub, str(value)), missing

    def required(self, value: str, what: str) -> str:
        out, missing = self.expand(value)
        if missing:
            raise McpConfigError(f"unresolved placeholder(s) in {what}: {', '.join(missing)}")
        return out

    def mapping(self, raw: Any) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if not isinstance(raw, dict):
            return out
        for k, v in raw.items():
            if not isinstance(v, str):
                continue
            expanded, missing = self.expand(v)
            if missing:
                continue
            out[str(k)] = expanded
        return out


def normalize_server_definition(
    raw: Dict[str, Any],
    source: Path,
    *,
    working_dir: str,
    env: Mapping[str, Optional[str]],
) -> McpServerConfig:
    """
    Raises McpConfigError for a malformed descriptor.
    """
    server_id = sanitize_id(raw.get("id", ""))
    if not server_id:
        raise McpConfigError("server id is missing")

    transport = TRANSPORTS.get(str(raw.get("type") or "stdio").strip().lower())
    if transport is None:
        raise McpConfigError(f"{server_id}: unsupported transport {raw.get('type')!r}")

    x = _Expander(working_dir=working_dir, env=env, source=source)
    description = raw.get("description") if isinstance(raw.get("description"), str) else None

    if transport == "http":
        url = x.required(str(raw.get("url") or ""), f"{server_id}.url").strip()
        if not url:
            raise McpConfigError(f"{server_id}: url is required for http transport")
        return McpServerConfig(
            id=server_id,
            source=str(source),
            transport=transport,
            url=url,
            headers=x.mapping(raw.get("headers")),
            description=description,
        )

    command = x.required(str(raw.get("command") or ""), f"{server_id}.command").strip()
    if not command:
        raise McpConfigError(f"{server_id}: command is required")
    raw_args = raw.get("args") or []
    if not isinstance(raw_args, list):
        raise McpConfigError(f"{server_id}: args must be a list")
    args = tuple(x.required(str(a), f"{server_id}.args") for a in raw_args if a is not None)
    cwd = x.required(str(raw["cwd"]), f"{server_id}.cwd") if raw.get("cwd") else None

    return McpServerConfig(
        id=server_id,
        source=str(source),
        transport=transport,
        command=command,
        args=args,
        cwd=cwd,
        env=x.mapping(raw.get("env")),
        description=description,
    )


def load_mcp_servers(*, working_dir: str, env: Mapping[str, Optional[str]]) -> List[McpServerConfig]:
    """
    Read server descriptors fresh from disk. Bad files and bad entries are skipped.
    """
    servers: Dict[str, McpServerConfig] = {}
    for path in discover_config_files(working_dir, env):
        try:
            definitions = parse_config_file(path)
        except (OSError, ValueError) as e:
            logger.warning("ignoring MCP config %s: %s", path, e)
            continue
        for definition in definitions:
            if definition.get("disabled"):
                servers.pop(sanitize_id(definition.get("id", "")), None)
                continue
            try:
                entry = normalize_server_definition(definition, path, working_dir=working_dir, env=env)
            except McpConfigError as e:
                logger.warning("skipping MCP server from %s: %s", path, e)
                continue
            servers[entry.id] = entry
    return list(servers.values())
