from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class MCPTool:
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=dict)


def parse_tools(result: Any) -> List[MCPTool]:
    tools = result.get("tools") if isinstance(result, dict) else None
    out: List[MCPTool] = []
    if isinstance(tools, list):
        for t in tools:
            if not isinstance(t, dict) or not str(t.get("name", "") or "").strip():
                continue
            schema = t.get("inputSchema")
            out.append(
                MCPTool(
                    name=str(t["name"]).strip(),
                    description=str(t.get("description", "") or ""),
                    input_schema=dict(schema) if isinstance(schema, dict) else {},
                )
            )
    return out


def format_content_block(block: Any) -> str:
    if not isinstance(block, dict):
        return str(block)
    kind = block.get("type")
    if kind == "text":
        return str(block.get("text") or "")
    if kind == "markdown":
        return str(block.get("markdown") or "")
    if kind == "json":
        return json.dumps(block["json"], indent=2) if "json" in block else ""
    if kind == "resource":
        uri = block.get("uri") or (block.get("resource") or {}).get("uri") or "(unknown uri)"
        desc = block.get("description")
        return f"Resource: {uri}" + (f"\n{desc}" if desc else "")
    return json.dumps(block, indent=2)


def format_tool_result(result: Any) -> str:
    blocks = result.get("content") if isinstance(result, dict) else None
    if not isinstance(blocks, list) or not blocks:
        return "MCP tool completed without returning content."
    return "\n\n".join(format_content_block(b) for b in blocks)
