"""Command line interface: list, call and serve the X tools."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import XConfig
from .errors import XPluginError
from .mcp_server import register_tools, to_jsonable
from .plugin import XPlugin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="x-plugin",
        description="X (Twitter) tools for AI agents.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with X_* credentials (default: ./.env)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tools_parser = subparsers.add_parser(
        "tools",
        help="List available tools",
        description="Print the tool catalog as OpenAI-style function definitions.",
    )
    tools_parser.add_argument(
        "--names",
        action="store_true",
        help="Print tool names only",
    )
    tools_parser.set_defaults(func=cmd_tools)

    call_parser = subparsers.add_parser(
        "call",
        help="Call a tool",
        description="Run one tool and print its result as JSON.",
    )
    call_parser.add_argument("tool", type=str, help="Tool name (e.g. x_get_profile)")
    call_parser.add_argument(
        "--params",
        "-p",
        type=str,
        default="{}",
        help="Tool parameters as a JSON object",
    )
    call_parser.set_defaults(func=cmd_call)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the tools over MCP",
        description="Run a FastMCP server exposing the X tools.",
    )
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def _load_plugin(args: argparse.Namespace) -> XPlugin:
    return XPlugin(XConfig.from_env(dotenv_path=args.env_file))


def cmd_tools(args: argparse.Namespace) -> int:
    """List the tool catalog."""
    plugin = _load_plugin(args)
    if args.names:
        for tool in plugin.get_tools():
            print(tool.name)
    else:
        print(json.dumps(plugin.get_function_definitions(), indent=2))
    return 0


def cmd_call(args: argparse.Namespace) -> int:
    """Run a single tool."""
    try:
        params = json.loads(args.params)
    except json.JSONDecodeError as e:
        print(f"Invalid --params JSON: {e}", file=sys.stderr)
        return 2
    if not isinstance(params, dict):
        print("--params must be a JSON object", file=sys.stderr)
        return 2

    plugin = _load_plugin(args)

    async def run():
        try:
            return await plugin.execute(args.tool, params)
        finally:
            await plugin.aclose()

    try:
        result = asyncio.run(run())
    except XPluginError as e:
        print(json.dumps({"error": str(e)}, indent=2))
        return 1

    print(json.dumps(to_jsonable(result), indent=2, default=str))
    if isinstance(result, dict) and result.get("success") is False:
        return 1
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the tools over MCP."""
    from fastmcp import FastMCP

    plugin = _load_plugin(args)
    mcp = FastMCP("x")
    names = register_tools(mcp, plugin)
    logging.getLogger(__name__).info(f"Serving {len(names)} X tools over {args.transport}")

    if args.transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=args.transport, host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
