"""CLI entry point for riyl-chat."""

from __future__ import annotations

import argparse
import asyncio
import sys

from riyl_chat.config import AppConfig, load_config
from riyl_chat.log import setup_logging


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="riyl-chat",
        description="Music recommendation chat backed by an LLM completion gateway",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("chat", "Start the interactive terminal chat"),
        ("serve", "Run the completion gateway HTTP service"),
        ("config-check", "Validate configuration"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
        sub.add_argument("-e", "--env", default=".env", help="Path to .env file")

    args = parser.parse_args(argv)

    if args.command is None:
        # Default to chat
        args.command = "chat"
        args.config = "config.yaml"
        args.env = ".env"

    config = _load(args.config, args.env)

    if args.command == "config-check":
        _check_config(args.config, config)
    elif args.command == "serve":
        _serve(config)
    elif args.command == "chat":
        _chat(config)


def _load(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and adjust it", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, config: AppConfig) -> None:
    """Print a configuration summary."""
    print(f"Configuration valid: {config_path}")
    print(f"  Data directory: {config.data_dir}")
    print(f"  AI backend    : {config.ai.backend} ({config.ai.model})")
    print(f"  Recommendations per reply: {config.ai.recommendation_count}")
    backend_section = getattr(config, config.ai.backend.value)
    if backend_section is None:
        print(f"  Warning: no '{config.ai.backend.value}' section; 'serve' will fail")
    print(f"  Gateway       : {config.gateway.base_url} (listen {config.gateway.host}:{config.gateway.port})")
    print(f"  Storage       : {config.storage.path} [{config.storage.key}]")


def _serve(config: AppConfig) -> None:
    import uvicorn

    from riyl_chat.app import create_gateway_app

    setup_logging(config.log_level, config.log_format)
    try:
        app = create_gateway_app(config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    uvicorn.run(app, host=config.gateway.host, port=config.gateway.port)


def _chat(config: AppConfig) -> None:
    from riyl_chat.app import RiylChatApp

    setup_logging(config.log_level, config.log_format)
    try:
        asyncio.run(RiylChatApp(config).run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
