# -*- coding: utf-8 -*-
"""Location: ./tests/unit/dataverse_mcp/test_dataverse_cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the ``dataverse-mcp`` console script.
"""

# Standard
import sys
from unittest.mock import patch

# Third-Party
import pytest

# First-Party
from dataverse_mcp import __version__
from dataverse_mcp import cli
from dataverse_mcp.config import Settings

CREDENTIALS = "DATAVERSE_URL=https://org.crm.dynamics.com\nDATAVERSE_TENANT_ID=t\nDATAVERSE_CLIENT_ID=c\nDATAVERSE_SECRET=s\n"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATAVERSE_URL", "DATAVERSE_TENANT_ID", "DATAVERSE_CLIENT_ID", "DATAVERSE_SECRET", "STATIC_DIR", "PORT", "PUBLIC_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


def test_uvicorn_argv_adds_app_host_and_port():
    args = cli.build_uvicorn_argv(["--reload"], Settings(host="127.0.0.1", port=3001))
    assert args == ["dataverse_mcp.main:app", "--reload", "--host", "127.0.0.1", "--port", "3001"]


def test_uvicorn_argv_keeps_explicit_values():
    args = cli.build_uvicorn_argv(["other.app:app", "--host", "0.0.0.0", "--port", "9000"], Settings())
    assert args == ["other.app:app", "--host", "0.0.0.0", "--port", "9000"]


def test_uvicorn_argv_uds_skips_host_and_port():
    args = cli.build_uvicorn_argv(["--uds", "/tmp/mcp.sock"], Settings())
    assert args == ["dataverse_mcp.main:app", "--uds", "/tmp/mcp.sock"]


def test_version(capsys):
    cli.main(["--version"])
    assert capsys.readouterr().out.strip() == f"dataverse-mcp {__version__}"


def test_main_delegates_to_uvicorn(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["dataverse-mcp"])
    with patch("dataverse_mcp.cli.uvicorn.main") as uv_main:
        cli.main(["--reload"])
    assert sys.argv[:3] == ["dataverse-mcp", "dataverse_mcp.main:app", "--reload"]
    uv_main.assert_called_once_with()


def test_check_settings_complete(tmp_path):
    env = tmp_path / ".env"
    env.write_text(CREDENTIALS + f"STATIC_DIR={tmp_path}\n", encoding="utf-8")
    assert cli.check_settings(str(env)) == []


def test_check_settings_reports_missing_credentials_and_static_dir(tmp_path):
    env = tmp_path / ".env"
    env.write_text(f"DATAVERSE_URL=https://org.crm.dynamics.com\nSTATIC_DIR={tmp_path / 'absent'}\n", encoding="utf-8")

    problems = cli.check_settings(str(env))

    assert len(problems) == 2
    assert problems[0].startswith("DATAVERSE_TENANT_ID not configured")
    assert "does not exist" in problems[1]


def test_check_settings_rejects_relative_public_base_url(tmp_path):
    env = tmp_path / ".env"
    env.write_text(CREDENTIALS + "PUBLIC_BASE_URL=/reports\n", encoding="utf-8")

    problems = cli.check_settings(str(env))

    assert len(problems) == 1
    assert problems[0].startswith("public_base_url")


def test_validate_config_ok(tmp_path, capsys):
    env = tmp_path / ".env"
    env.write_text(CREDENTIALS + f"STATIC_DIR={tmp_path}\nPUBLIC_BASE_URL=https://MCP.example.com:443\n", encoding="utf-8")

    cli.main(["--validate-config", str(env)])

    out = capsys.readouterr().out
    assert "is valid" in out
    assert "https://mcp.example.com/dynamic" in out


def test_validate_config_invalid(tmp_path, capsys):
    env = tmp_path / ".env"
    env.write_text("PORT=not-a-number\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["--validate-config", str(env)])

    assert exc.value.code == 1
    assert "port" in capsys.readouterr().err
