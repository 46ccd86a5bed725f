import json

from toolhost.cli import main


def test_plugins_lists_defaults(capsys):
    assert main(["plugins"]) == 0
    out = capsys.readouterr().out
    assert "tool.filesystem.local" in out
    assert "tool.mcp.bridge" in out


def test_providers_marks_the_default(capsys):
    assert main(["providers"]) == 0
    assert "openai (default)" in capsys.readouterr().out


def test_tools_json_for_node_workspace(workspace, capsys):
    assert main(["tools", "--cwd", str(workspace), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [s["id"] for s in payload["suites"]] == ["filesystem", "search", "shell", "web"]
    assert payload["failures"] == []


def test_unknown_profile_is_a_configuration_error(workspace, capsys):
    assert main(["tools", "--cwd", str(workspace), "--profile", "nope"]) == 2
