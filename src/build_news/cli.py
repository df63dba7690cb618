"""CLI for building the news JSON."""

from __future__ import annotations

import asyncio
import logging
import sys

import yaml
from dotenv import load_dotenv

from build_news.build_news import harvest
from build_news.config import load_config
from build_news.helpers import parse_build_news_args
from build_news.write_output.write import write_diagnostics, write_empty_fallback, write_records
from common.cli_helpers import setup_logging

load_dotenv()

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    args = parse_build_news_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("Failed to load config %s: %s", args.config, e)
        return 1

    if args.output:
        config.output.path = args.output

    result = asyncio.run(harvest(config))

    if not result.records:
        logger.warning("No news items collected")

    try:
        write_records(result.records, config.output.path, result.captured_at)
    except OSError as e:
        logger.error("Failed to write %s: %s", config.output.path, e)
        write_empty_fallback(config.output.path)
        return 1

    write_diagnostics(result, config.output.debug_path, config.output.debug_sample_size)
    return 0


if __name__ == "__main__":
    sys.exit(main())
