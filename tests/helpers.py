import json
import textwrap
from pathlib import Path

from toolhost.runtime.capabilities.provider import CapabilityContribution, FunctionCapabilityModule
from toolhost.runtime.tools.registry import ToolDefinition, ToolSuite


async def _noop(args):
    return "ok"


def make_suite(suite_id, *tool_names):
    names = tool_names or (f"{suite_id}_tool",)
    return ToolSuite(
        id=suite_id,
        description=f"suite {suite_id}",
        tools=tuple(
            ToolDefinition(name=n, capability="test", description=n, parameters={"type": "object"}, executor=_noop)
            for n in names
        ),
    )


def make_module(module_id, suite_id=None, dispose=None):
    """Module contributing one suite (or nothing when suite_id is None)."""

    def factory(ctx):
        if suite_id is None:
            return None
        return CapabilityContribution(id=f"{module_id}.contribution", tool_suite=make_suite(suite_id), dispose=dispose)

    return FunctionCapabilityModule(id=module_id, factory=factory)


def write_mcp_config(root: Path, servers: dict, name: str = ".mcp.json") -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(servers, indent=2), encoding="utf-8")
    return path


MCP_SERVER_SOURCE = textwrap.dedent(
    '''
    import json
    import sys

    TOOLS = [
        {"name": "echo", "description": "Echo text back", "inputSchema": {"type": "object", "properties": {"text": {"type": "string"}}}},
        {"name": "add", "description": "", "inputSchema": {"type": "object"}},
    ]
    if len(sys.argv) > 1 and sys.argv[1] == "--no-tools":
        TOOLS = []
    if len(sys.argv) > 1 and sys.argv[1] == "--crash":
        sys.stderr.write("boom\\n")
        sys.exit(3)

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        msg = json.loads(line)
        if "id" not in msg:
            continue
        method = msg.get("method")
        if method == "initialize":
            result = {"protocolVersion": "2024-11-05", "capabilities": {"tools": {}}, "serverInfo": {"name": "fake", "version": "1"}}
        elif method == "tools/list":
            result = {"tools": TOOLS}
        elif method == "tools/call":
            params = msg.get("params") or {}
            args = params.get("arguments") or {}
            if params.get("name") == "echo":
                result = {"content": [{"type": "text", "text": args.get("text", "")}]}
            else:
                result = {"content": [{"type": "json", "json": {"sum": args.get("a", 0) + args.get("b", 0)}}]}
        else:
            error = {"code": -32601, "message": "unknown method"}
            sys.stdout.write(json.dumps({"jsonrpc": "2.0", "id": msg["id"], "error": error}) + "\\n")
            sys.stdout.flush()
            continue
        sys.stdout.write(json.dumps({"jsonrpc": "2.0", "id": msg["id"], "result": result}) + "\\n")
        sys.stdout.flush()
    '''
)
