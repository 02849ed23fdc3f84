"""
Sentiment analysis demo on streaming text.

Modes:
1. file: reads one text per line from a file (default: bundled samples)
2. socket: reads lines from a TCP socket (start one with `nc -lk 9999`)

Usage:
    python -m flowagents.demo.sentiment file --ollama-url http://localhost:11434
    python -m flowagents.demo.sentiment socket --host localhost --port 9999
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from flowagents.core.config import AgentsConfig
from flowagents.core.environment import AgentEnvironment
from flowagents.core.resources import ResourceDescriptor, ResourceType
from flowagents.demo.sentiment.agent import CONNECTION_RESOURCE, SentimentAgent
from flowagents.demo.sources import file_source, socket_source

logger = logging.getLogger("flowagents.demo.sentiment")

SAMPLE_TEXTS = Path(__file__).parent / "sample_texts.txt"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m flowagents.demo.sentiment",
        description="Run the sentiment agent over a stream of texts.",
    )
    parser.add_argument("mode", nargs="?", choices=["file", "socket"], default="file")
    parser.add_argument("--ollama-url", help="Ollama server URL (overrides config)")
    parser.add_argument("--model", help="Ollama model name (overrides config)")
    parser.add_argument("--path", type=Path, default=SAMPLE_TEXTS, help="Input file for file mode")
    parser.add_argument("--host", default="localhost", help="Socket host for socket mode")
    parser.add_argument("--port", type=int, default=9999, help="Socket port for socket mode")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> AgentsConfig:
    config = AgentsConfig.from_yaml(args.config) if args.config else AgentsConfig()
    overrides = {}
    if args.ollama_url:
        overrides["ollama_base_url"] = args.ollama_url.rstrip("/")
    if args.model:
        overrides["sentiment_model"] = args.model
    return config.model_copy(update=overrides) if overrides else config


async def run_demo(args: argparse.Namespace, config: AgentsConfig) -> int:
    env = AgentEnvironment(config)
    env.add_resource(
        CONNECTION_RESOURCE,
        ResourceType.CHAT_MODEL_CONNECTION,
        ResourceDescriptor.of(
            "ollama_connection",
            base_url=config.ollama_base_url,
            request_timeout=config.ollama_request_timeout,
            max_retries=config.ollama_max_retries,
        ),
    )
    agent = SentimentAgent(model=config.sentiment_model)

    if args.mode == "socket":
        source = socket_source(args.host, args.port)
    else:
        logger.info(f"Reading from file: {args.path}")
        source = file_source(args.path)

    failures = 0
    try:
        async for result in env.process(source, agent):
            if result.ok:
                print(result.output, flush=True)
            else:
                failures += 1
                print(f"FAILED {result.input!r}: {result.error}", file=sys.stderr, flush=True)
    finally:
        await env.aclose()

    return 1 if failures else 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config(args)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("=== Simple Sentiment Analysis Demo ===")
    logger.info(f"Mode: {args.mode}")
    logger.info(f"Ollama URL: {config.ollama_base_url}")

    try:
        return asyncio.run(run_demo(args, config))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
