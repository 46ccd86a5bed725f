from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

import httpx

from toolhost import __version__
from toolhost.errors import McpError
from toolhost.runtime.mcp.stdio_client import PROTOCOL_VERSION
from toolhost.runtime.mcp.types import MCPTool, parse_tools


class MCPStreamableHttpClient:
    """
    Minimal MCP Streamable HTTP client.

    Implements enough of the transport to:
    - initialize session
    - tools/list
    - tools/call
    """

    def __init__(self, *, base_url: str, headers: Optional[Dict[str, str]] = None, timeout_s: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = float(timeout_s)
        self._session_id: Optional[str] = None
        self._initialized = False
        self._client = httpx.AsyncClient(timeout=self.timeout_s, headers=dict(headers or {}))

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json, text/event-stream"}
        if self._session_id:
            headers["Mcp-Session-Id"] = self._session_id
        return headers

    async def _post(self, body: Dict[str, Any]) -> httpx.Response:
        try:
            resp = await self._client.post(self.base_url, headers=self._headers(), json=body)
        except httpx.HTTPError as e:
            raise McpError(f"{self.base_url}: {e}") from e
        if resp.status_code >= 400:
            raise McpError(f"HTTP {resp.status_code}: {resp.text[:300]}")
        return resp

    async def _rpc(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        body: Dict[str, Any] = {"jsonrpc": "2.0", "id": uuid4().hex, "method": method}
        if params is not None:
            body["params"] = params
        resp = await self._post(body)
        try:
            data = resp.json()
        except ValueError as e:
            raise McpError("Invalid JSON-RPC response") from e
        if not isinstance(data, dict):
            raise McpError("Invalid JSON-RPC response")
        if data.get("error"):
            raise McpError(str(data["error"]))
        return data.get("result")

    async def start(self) -> None:
        """
        Initialize and store session id, if returned via headers.
        """
        resp = await self._post(
            {
                "jsonrpc": "2.0",
                "id": uuid4().hex,
                "method": "initialize",
                "params": {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {"name": "toolhost", "version": __version__},
                },
            }
        )
        sid = resp.headers.get("Mcp-Session-Id")
        if sid:
            self._session_id = sid
        await self._post({"jsonrpc": "2.0", "method": "notifications/initialized", "params": {}})
        self._initialized = True

    async def list_tools(self) -> List[MCPTool]:
        if not self._initialized:
            await self.start()
        return parse_tools(await self._rpc("tools/list", params={}))

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        if not self._initialized:
            await self.start()
        return await self._rpc("tools/call", params={"name": name, "arguments": arguments})
