from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from toolhost import __version__
from toolhost.errors import McpError
from toolhost.runtime.mcp.config import McpServerConfig
from toolhost.runtime.mcp.types import MCPTool, parse_tools

logger = logging.getLogger("toolhost.mcp")

PROTOCOL_VERSION = "2024-11-05"
STREAM_LIMIT = 16 * 1024 * 1024


class McpStdioClient:
    """
    MCP client for a child process speaking newline-delimited JSON-RPC 2.0 on stdio.

    Usage: `await client.start()` spawns and performs the initialize handshake.
    `close()` is safe on a client that never started or whose process already exited.
    """

    def __init__(self, server: McpServerConfig, *, working_dir: str, timeout_s: float = 60.0):
        self.server = server
        self.working_dir = working_dir
        self.timeout_s = float(timeout_s)
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._pending: Dict[int, asyncio.Future] = {}
        self._next_id = 1
        self._reader: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._stderr: Deque[str] = deque(maxlen=5)
        self._closed = False

    @property
    def id(self) -> str:
        return self.server.id

    async def start(self) -> None:
        if self._proc is not None:
            return
        env = {**os.environ, **self.server.env}
        try:
            self._proc = await asyncio.create_subprocess_exec(
                self.server.command,
                *self.server.args,
                cwd=self.server.cwd or self.working_dir,
                env=env,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise McpError(f'Failed to start MCP server "{self.id}": {e}') from e
        self._reader = asyncio.create_task(self._read_stdout())
        self._stderr_task = asyncio.create_task(self._read_stderr())
        await self._request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": True}},
                "clientInfo": {"name": "toolhost", "version": __version__},
            },
        )
        await self._notify("notifications/initialized", {})

    async def list_tools(self) -> List[MCPTool]:
        result = await self._request("tools/list", {})
        return parse_tools(result)

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        return await self._request("tools/call", {"name": name, "arguments": arguments or {}})

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._fail_pending(McpError(f'MCP server "{self.id}" disposed.'))
        proc = self._proc
        if proc is not None and proc.returncode is None:
            try:
                if proc.stdin is not None:
                    proc.stdin.close()
                proc.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(proc.wait(), timeout=5)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
        for task in (self._reader, self._stderr_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    async def _write(self, payload: Dict[str, Any]) -> None:
        proc = self._proc
        if self._closed or proc is None or proc.stdin is None or proc.returncode is not None:
            raise McpError(f'MCP server "{self.id}" is not running.')
        proc.stdin.write((json.dumps(payload) + "\n").encode("utf-8"))
        try:
            await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise McpError(f'MCP server "{self.id}" closed its input: {e}') from e

    async def _notify(self, method: str, params: Any) -> None:
        await self._write({"jsonrpc": "2.0", "method": method, "params": params})

    async def _request(self, method: str, params: Any) -> Any:
        req_id = self._next_id
        self._next_id += 1
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[req_id] = fut
        try:
            await self._write({"jsonrpc": "2.0", "id": req_id, "method": method, "params": params})
            return await asyncio.wait_for(fut, timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise McpError(f'Timed out waiting for "{method}" from MCP server "{self.id}".') from e
        finally:
            self._pending.pop(req_id, None)

    async def _read_stdout(self) -> None:
        assert self._proc is not None and self._proc.stdout is not None
        stdout = self._proc.stdout
        while True:
            line = await stdout.readline()
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except ValueError:
                logger.debug("MCP server %s wrote a non-JSON line", self.id)
                continue
            if isinstance(message, dict):
                self._dispatch(message)
        code = await self._proc.wait()
        if not self._closed:
            self._fail_pending(McpError(f'MCP server "{self.id}" exited with code {code}.{self._stderr_tail()}'))

    async def _read_stderr(self) -> None:
        assert self._proc is not None and self._proc.stderr is not None
        while True:
            line = await self._proc.stderr.readline()
            if not line:
                return
            text = line.decode("utf-8", errors="replace").strip()
            if text:
                self._stderr.append(text)

    def _dispatch(self, message: Dict[str, Any]) -> None:
        req_id = message.get("id")
        fut = self._pending.get(req_id) if isinstance(req_id, int) else None
        if fut is None:
            # Server notifications (e.g. notifications/tools/list_changed) are ignored.
            return
        if fut.done():
            return
        err = message.get("error")
        if err:
            text = err.get("message") if isinstance(err, dict) else str(err)
            fut.set_exception(McpError(f"{text or 'MCP server returned an error.'}{self._stderr_tail()}"))
        else:
            fut.set_result(message.get("result"))

    def _stderr_tail(self) -> str:
        return ("\n" + "\n".join(self._stderr)) if self._stderr else ""

    def _fail_pending(self, error: Exception) -> None:
        for fut in self._pending.values():
            if not fut.done():
                fut.set_exception(error)
        self._pending.clear()
