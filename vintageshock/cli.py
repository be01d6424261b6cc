"""
VintageShock CLI
================

Usage:
    vintageshock status             # Show current settings
    vintageshock test               # Send one test shock
    vintageshock set                # How to change settings
    vintageshock init               # Write a config template
    vintageshock serve              # Run the HTTP/WebSocket ingress
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Tuple

from .config import DEFAULT_CONFIG_FILE, ShockConfig
from .engine import ShockEngine

ENV_CONFIG = "VINTAGESHOCK_CONFIG"


def build_engine(config_path: str) -> ShockEngine:
    config = ShockConfig(config_path)
    config.load()
    return ShockEngine(config=config)


async def _send_test(engine: ShockEngine) -> Tuple[bool, str]:
    await engine.start()
    try:
        return engine.test_shock()
    finally:
        await engine.stop()


def cmd_status(args) -> int:
    engine = build_engine(args.config)
    print(engine.status_text())
    return 0


def cmd_test(args) -> int:
    engine = build_engine(args.config)
    ok, message = asyncio.run(_send_test(engine))
    if not ok:
        print(f"❌ {message}")
        return 1
    print(f"⚡ {message}")
    stats = engine.dispatcher.stats
    if stats.sent:
        print(f"✅ API answered HTTP {stats.last_status}")
    elif stats.last_status is not None:
        print(f"⚠️ API answered HTTP {stats.last_status}")
    else:
        print("⚠️ API did not answer")
    return 0


def cmd_set(args) -> int:
    engine = build_engine(args.config)
    print(engine.set_help())
    return 0


def cmd_init(args) -> int:
    if os.path.exists(args.config) and not args.force:
        print(f"❌ {args.config} already exists (use --force to overwrite)")
        return 1
    config = ShockConfig(args.config)
    if not config.save_template(include_secrets=True):
        print(f"❌ Could not write {args.config}")
        return 1
    print(f"✅ Config template written to {args.config}")
    return 0


def cmd_serve(args) -> int:
    import uvicorn
    from .server import create_app

    engine = build_engine(args.config)
    print(f"⚡ VintageShock listening on http://{args.host}:{args.port}")
    print(f"🔌 Mod WebSocket: ws://{args.host}:{args.port}/mod")
    uvicorn.run(create_app(engine), host=args.host, port=args.port, log_level=args.log_level)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vintageshock",
        description="Damage-triggered OpenShock feedback",
    )
    parser.add_argument(
        "-c", "--config",
        default=os.environ.get(ENV_CONFIG, DEFAULT_CONFIG_FILE),
        help=f"Config file (default: ${ENV_CONFIG} or {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show current settings").set_defaults(func=cmd_status)
    sub.add_parser("test", help="Send one test shock").set_defaults(func=cmd_test)
    sub.add_parser("set", help="How to change settings").set_defaults(func=cmd_set)

    init = sub.add_parser("init", help="Write a config template")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init.set_defaults(func=cmd_init)

    serve = sub.add_parser("serve", help="Run the HTTP/WebSocket ingress")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3051)
    serve.add_argument("--log-level", default="info")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
