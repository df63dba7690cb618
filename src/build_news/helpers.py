"""Helper functions for the build_news CLI."""

from __future__ import annotations

import argparse


def parse_build_news_args(argv: list[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments for build_news.'''

    parser = argparse.ArgumentParser(
        description="Build the band news JSON from video, marketplace, press and search feeds"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config name (prod/test) or path to a YAML file. Defaults to $BUILD_NEWS_CONFIG or 'prod'.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSON path (overrides config and $NEWS_OUTPUT_PATH).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)
