import sys

import pytest

from toolhost.runtime.tools.filesystem import filesystem_list, filesystem_read, filesystem_write
from toolhost.runtime.tools.registry import ToolSet, ToolSuite
from toolhost.runtime.tools.search import fs_glob, fs_grep
from toolhost.runtime.tools.shell import shell_run

from helpers import make_suite


@pytest.mark.asyncio
async def test_filesystem_stays_inside_the_workspace(workspace):
    root = workspace.resolve()
    written = await filesystem_write(root, "src/app.py", "print('hi')\n")
    assert written["ok"] and written["bytes"] == len("print('hi')\n")
    assert (await filesystem_read(root, "src/app.py"))["content"] == "print('hi')\n"
    assert (await filesystem_list(root, "src"))["ok"]

    denied = await filesystem_read(root, "../outside.txt")
    assert denied["ok"] is False
    assert "outside workspace" in denied["error"]


@pytest.mark.asyncio
async def test_glob_and_grep(workspace):
    root = workspace.resolve()
    (root / "pkg").mkdir()
    (root / "pkg" / "mod.py").write_text("import os\nTODO = 1\n", encoding="utf-8")
    (root / "README.md").write_text("todo list\n", encoding="utf-8")
    (root / ".hidden").mkdir()
    (root / ".hidden" / "x.py").write_text("TODO\n", encoding="utf-8")

    assert (await fs_glob(root, pattern="*.py"))["matches"] == ["pkg/mod.py"]
    grep = await fs_grep(root, query="todo")
    assert [(r["path"], r["line"]) for r in grep["results"]] == [("README.md", 1), ("pkg/mod.py", 2)]
    assert (await fs_glob(root, pattern=""))["ok"] is False


@pytest.mark.asyncio
async def test_shell_run_reports_exit_status(workspace):
    ok = await shell_run("echo hello", cwd=str(workspace))
    assert ok["ok"] and ok["stdout"].strip() == "hello"
    failed = await shell_run("exit 4", cwd=str(workspace))
    assert failed == {"ok": False, "returncode": 4, "stdout": "", "stderr": ""}


@pytest.mark.asyncio
async def test_shell_run_times_out(workspace):
    result = await shell_run(f'"{sys.executable}" -c "import time; time.sleep(5)"', cwd=str(workspace), timeout_s=0.2)
    assert result["ok"] is False
    assert "Timeout" in result["error"]


def test_suite_rejects_duplicate_tool_names():
    with pytest.raises(ValueError, match="dup"):
        make_suite("s", "dup", "dup")


def test_tool_set_keeps_colliding_suites_and_warns(caplog):
    tools = ToolSet()
    tools.add("first", [make_suite("shared", "a")])
    with caplog.at_level("WARNING", logger="toolhost"):
        tools.add("second", [make_suite("shared", "b")])
    assert tools.suite_ids() == ["shared", "shared"]
    assert "shared" in caplog.text
    assert tools.get("b").name == "b"
    with pytest.raises(KeyError):
        tools.get("missing")


def test_openai_tool_shape():
    suite = make_suite("s", "do_thing")
    tool = suite.tools[0].to_openai_tool()
    assert tool["type"] == "function"
    assert tool["function"]["name"] == "do_thing"
    assert isinstance(ToolSuite(id="empty", tools=[]).tools, tuple)
