"""Configuration loader for build-news."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent / "configs"


@dataclass
class SubjectConfig:
    name: str = "OSIAH"
    homographs: list[str] = field(default_factory=lambda: ["Josiah"])
    block_terms: list[str] = field(default_factory=list)
    context_terms: list[str] = field(default_factory=list)
    trusted_hosts: list[str] = field(default_factory=list)


@dataclass
class YouTubeConfig:
    channel_ids: list[str] = field(default_factory=list)
    include_uploads_playlist: bool = True


@dataclass
class BandcampConfig:
    subdomain: str = ""
    mode: str = "catalog"  # "feed" or "catalog"
    detail_fetch_cap: int = 6
    detail_fetch_stagger_seconds: float = 0.4


@dataclass
class NewsSearchConfig:
    enabled: bool = True
    query_terms: list[str] = field(default_factory=list)


@dataclass
class HttpConfig:
    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_seconds: float = 0.5
    user_agent: str = "build-news/1.0 (feed harvester)"


@dataclass
class OutputConfig:
    path: str = "data/news.json"
    debug_path: str = "data/news.debug.json"
    max_items: int = 24
    debug_sample_size: int = 5


@dataclass
class Config:
    subject: SubjectConfig = field(default_factory=SubjectConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    bandcamp: BandcampConfig = field(default_factory=BandcampConfig)
    press_feeds: dict[str, str] = field(default_factory=dict)
    news_search: NewsSearchConfig = field(default_factory=NewsSearchConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def resolve_config_path(config_name: str) -> Path:
    """Map a config name (prod/test) or a YAML file path to a Path."""
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name)
    return CONFIG_DIR / f"{config_name}.yaml"


def load_config(config_name: str | None = None) -> Config:
    """Load configuration from YAML file and apply environment overrides.

    Args:
        config_name: Name of config file (without .yaml extension) or a path
                    to a YAML file. If None, uses BUILD_NEWS_CONFIG env var
                    or "prod".

    Returns:
        Loaded Config object

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    if config_name is None:
        config_name = os.environ.get("BUILD_NEWS_CONFIG", "prod")

    config_path = resolve_config_path(config_name)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    config = parse_config(data)
    apply_env_overrides(config, os.environ)
    logger.debug("Loaded config from %s", config_path)
    return config


def parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object."""
    subject_data = data.get("subject") or {}
    defaults = SubjectConfig()
    subject = SubjectConfig(
        name=subject_data.get("name", defaults.name),
        homographs=list(subject_data.get("homographs", defaults.homographs)),
        block_terms=list(subject_data.get("block_terms", [])),
        context_terms=list(subject_data.get("context_terms", [])),
        trusted_hosts=list(subject_data.get("trusted_hosts", [])),
    )

    youtube_data = data.get("youtube") or {}
    youtube = YouTubeConfig(
        channel_ids=list(youtube_data.get("channel_ids") or []),
        include_uploads_playlist=youtube_data.get("include_uploads_playlist", True),
    )

    bandcamp_data = data.get("bandcamp") or {}
    bandcamp = BandcampConfig(
        subdomain=bandcamp_data.get("subdomain", ""),
        mode=bandcamp_data.get("mode", "catalog"),
        detail_fetch_cap=int(bandcamp_data.get("detail_fetch_cap", 6)),
        detail_fetch_stagger_seconds=float(bandcamp_data.get("detail_fetch_stagger_seconds", 0.4)),
    )
    if bandcamp.mode not in ("feed", "catalog"):
        raise ValueError(f"bandcamp.mode must be 'feed' or 'catalog', got {bandcamp.mode!r}")

    search_data = data.get("news_search") or {}
    news_search = NewsSearchConfig(
        enabled=search_data.get("enabled", True),
        query_terms=list(search_data.get("query_terms") or []),
    )

    http_data = data.get("http") or {}
    http = HttpConfig(
        timeout_seconds=float(http_data.get("timeout_seconds", 15.0)),
        max_retries=int(http_data.get("max_retries", 2)),
        backoff_seconds=float(http_data.get("backoff_seconds", 0.5)),
        user_agent=http_data.get("user_agent", HttpConfig.user_agent),
    )

    output_data = data.get("output") or {}
    output = OutputConfig(
        path=output_data.get("path", "data/news.json"),
        debug_path=output_data.get("debug_path", "data/news.debug.json") or "",
        max_items=int(output_data.get("max_items", 24)),
        debug_sample_size=int(output_data.get("debug_sample_size", 5)),
    )

    return Config(
        subject=subject,
        youtube=youtube,
        bandcamp=bandcamp,
        press_feeds=dict(data.get("press_feeds") or {}),
        news_search=news_search,
        http=http,
        output=output,
    )


def apply_env_overrides(config: Config, environ) -> Config:
    """Apply operator overrides from the environment in place."""
    channel_ids = environ.get("YOUTUBE_CHANNEL_IDS")
    if channel_ids:
        config.youtube.channel_ids = [c.strip() for c in channel_ids.split(",") if c.strip()]

    subdomain = environ.get("BANDCAMP_SUBDOMAIN")
    if subdomain:
        config.bandcamp.subdomain = subdomain.strip()

    output_path = environ.get("NEWS_OUTPUT_PATH")
    if output_path:
        config.output.path = output_path

    debug_path = environ.get("NEWS_DEBUG_PATH")
    if debug_path is not None:
        config.output.debug_path = debug_path

    max_items = environ.get("NEWS_MAX_ITEMS")
    if max_items:
        try:
            config.output.max_items = int(max_items)
        except ValueError:
            logger.warning("Invalid NEWS_MAX_ITEMS=%r; keeping %d", max_items, config.output.max_items)

    return config
