from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from toolhost import config
from toolhost.errors import ConfigurationError
from toolhost.runtime.adapters.browser import BrowserRuntimeAdapter
from toolhost.runtime.adapters.node import NodeRuntimeAdapter
from toolhost.runtime.adapters.remote import RemoteRuntimeAdapter
from toolhost.runtime.host import UniversalRuntime
from toolhost.runtime.llm.defaults import register_default_providers
from toolhost.runtime.llm.factory import ProviderRegistry
from toolhost.runtime.plugins.defaults import register_default_node_tool_plugins
from toolhost.runtime.plugins.registry import ToolPluginRegistry
from toolhost.runtime.profiles import ProfileRegistry, register_default_profiles
from toolhost.runtime.universal import create_universal_runtime

console = Console()


def _adapter(target: str, plugins: ToolPluginRegistry):
    if target == "browser":
        return BrowserRuntimeAdapter()
    if target == "cloud":
        register_default_node_tool_plugins(plugins)
        return RemoteRuntimeAdapter(plugins=plugins)
    return NodeRuntimeAdapter(plugins)


def _print_runtime(runtime: UniversalRuntime) -> None:
    table = Table(title=f"Tool set ({runtime.adapter_id})")
    table.add_column("Contribution")
    table.add_column("Suite")
    table.add_column("Tools")
    for contribution_id in runtime.tools.contributions():
        for suite in runtime.tools.suites(contribution_id):
            table.add_row(contribution_id, suite.id, ", ".join(suite.names()))
    console.print(table)
    for failure in runtime.failures:
        console.print(f"[yellow]skipped[/yellow] {failure.describe()}")


async def _tools(args: argparse.Namespace) -> int:
    plugins = ToolPluginRegistry()
    profiles = ProfileRegistry()
    register_default_profiles(profiles)
    runtime = await create_universal_runtime(
        _adapter(args.target, plugins),
        profile=args.profile or config.default_profile(),
        working_dir=os.path.abspath(args.cwd),
        profiles=profiles,
    )
    try:
        if args.json:
            payload = {
                "suites": [
                    {"contribution": cid, "id": s.id, "tools": s.names()}
                    for cid in runtime.tools.contributions()
                    for s in runtime.tools.suites(cid)
                ],
                "failures": [f.describe() for f in runtime.failures],
            }
            print(json.dumps(payload, indent=2))
        else:
            _print_runtime(runtime)
    finally:
        failures = await runtime.close()
    return 1 if failures else 0


def _plugins(args: argparse.Namespace) -> int:
    plugins = ToolPluginRegistry()
    register_default_node_tool_plugins(plugins)
    table = Table(title="Tool plugins")
    table.add_column("Id", no_wrap=True)
    table.add_column("Targets")
    table.add_column("Description")
    for plugin in plugins.list():
        table.add_row(plugin.id, ", ".join(sorted(plugin.targets)), plugin.description)
    console.print(table)
    return 0


def _providers(args: argparse.Namespace) -> int:
    providers = ProviderRegistry()
    register_default_providers(providers)
    for provider_id in sorted(providers.list()):
        marker = " (default)" if provider_id == config.default_provider() else ""
        console.print(f"{provider_id}{marker}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="toolhost", description="Assemble and inspect agent tool sets.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    tools = sub.add_parser("tools", help="Assemble a runtime and print its tool set")
    tools.add_argument("--target", choices=["node", "browser", "cloud"], default="node")
    tools.add_argument("--cwd", default=".", help="Workspace directory")
    tools.add_argument("--profile", default=None)
    tools.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    sub.add_parser("plugins", help="List default tool plugins")
    sub.add_parser("providers", help="List registered LLM providers")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else config.log_level())
    try:
        if args.command == "tools":
            return asyncio.run(_tools(args))
        if args.command == "plugins":
            return _plugins(args)
        return _providers(args)
    except ConfigurationError as e:
        console.print(f"[red]error:[/red] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
