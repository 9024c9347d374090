# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

dataverse-mcp console script.

Serves ``dataverse_mcp.main:app`` through Uvicorn on the configured
``HOST``/``PORT`` (default 127.0.0.1:3001), the same address the public
``/dynamic`` resource URLs are derived from. Any other argument is passed
to Uvicorn unchanged.

```console
$ dataverse-mcp                          # serve on 127.0.0.1:3001
$ dataverse-mcp --reload --log-level debug
$ dataverse-mcp --validate-config .env   # check settings before deploying
```
"""

# Standard
import sys
from typing import List, Optional

# Third-Party
from pydantic import ValidationError
import uvicorn

# First-Party
from dataverse_mcp import __version__
from dataverse_mcp.config import Settings

DEFAULT_APP = "dataverse_mcp.main:app"


def build_uvicorn_argv(raw_args: List[str], settings: Settings) -> List[str]:
    """Uvicorn arguments serving this app on the configured address.

    Args:
        raw_args: Arguments given after ``dataverse-mcp``.
        settings: Settings supplying host and port.

    Returns:
        List[str]: Arguments for ``uvicorn.main``.

    Examples:
        >>> build_uvicorn_argv([], Settings(host="127.0.0.1", port=3001))
        ['dataverse_mcp.main:app', '--host', '127.0.0.1', '--port', '3001']
        >>> build_uvicorn_argv(["--port", "9000"], Settings(host="0.0.0.0"))
        ['dataverse_mcp.main:app', '--port', '9000', '--host', '0.0.0.0']
    """
    args = list(raw_args)
    if not args or args[0].startswith("-"):
        args.insert(0, DEFAULT_APP)

    # A unix socket replaces the TCP binding
    if "--uds" in args:
        return args
    if "--host" not in args:
        args += ["--host", settings.host]
    if "--port" not in args:
        args += ["--port", str(settings.port)]
    return args


def check_settings(env_file: str = ".env") -> List[str]:
    """Load settings from ``env_file`` and the environment and list problems.

    Args:
        env_file: Dotenv file to read.

    Returns:
        List[str]: Human readable problems, empty when the server can run
        every tool.
    """
    try:
        settings = Settings(_env_file=env_file)
    except ValidationError as e:
        return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]

    problems = []
    try:
        settings.require_dataverse()
    except ValueError as e:
        problems.append(f"{e}; Dataverse tools will return errors")
    if not settings.static_dir.is_dir():
        problems.append(f"STATIC_DIR {settings.static_dir} does not exist; only published resources are served under /dynamic")
    return problems


def _validate_config(env_file: str) -> int:
    """Print the outcome of ``check_settings``.

    Args:
        env_file: Dotenv file to read.

    Returns:
        int: Process exit code.
    """
    problems = check_settings(env_file)
    if not problems:
        settings = Settings(_env_file=env_file)
        print(f"✅ Configuration in {env_file} is valid; resources are published under {settings.resolved_public_base_url}/dynamic")
        return 0
    print(f"❌ Configuration in {env_file} has problems:", file=sys.stderr)
    for problem in problems:
        print(f"  - {problem}", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``dataverse-mcp`` console script.

    Args:
        argv: Arguments, ``sys.argv[1:]`` when omitted.

    Raises:
        SystemExit: With status 1 when ``--validate-config`` finds problems.
    """
    args = sys.argv[1:] if argv is None else list(argv)

    if "--version" in args or "-V" in args:
        print(f"dataverse-mcp {__version__}")
        return

    if args and args[0] == "--validate-config":
        code = _validate_config(args[1] if len(args) > 1 else ".env")
        if code:
            raise SystemExit(code)
        return

    sys.argv = ["dataverse-mcp", *build_uvicorn_argv(args, Settings())]
    uvicorn.main()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":  # pragma: no cover
    main()
