import sys

import pytest

from toolhost import config

from helpers import MCP_SERVER_SOURCE


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep MCP discovery and config reads away from the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("TOOLHOST_HOME", str(home / ".toolhost"))
    monkeypatch.setenv("TOOLHOST_CONFIG", str(tmp_path / "missing-toolhost.json"))
    monkeypatch.delenv("TOOLHOST_MCP_CONFIG", raising=False)
    config.load_config.cache_clear()
    yield
    config.load_config.cache_clear()


@pytest.fixture
def workspace(tmp_path):
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def mcp_server_script(tmp_path):
    path = tmp_path / "fake_mcp_server.py"
    path.write_text(MCP_SERVER_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def python_executable():
    return sys.executable
