"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from news_curator.core.errors import ConfigurationError
from news_curator.pipeline.batch_scoring import SCORING_MAX_TOKENS, SCORING_TEMPERATURE
from news_curator.pipeline.detail_analyzer import ANALYSIS_MAX_TOKENS, ANALYSIS_TEMPERATURE
from news_curator.report.evidence_validator import RELEVANCE_MAX_TOKENS, RELEVANCE_TEMPERATURE
from news_curator.report.quality_evaluator import EVALUATION_MAX_TOKENS, EVALUATION_TEMPERATURE
from news_curator.report.synthesizer import REPORT_MAX_TOKENS, REPORT_TEMPERATURE


@dataclass
class CallConfig:
    """Generation settings for one kind of model call."""
    max_tokens: int
    temperature: float


@dataclass
class ClaudeConfig:
    """Claude API settings."""
    model: str = "claude-sonnet-4-20250514"
    max_retries: int = 3
    base_retry_delay: float = 1.0
    max_retry_delay: float = 30.0
    request_timeout: float = 60.0
    report_timeout: float = 180.0
    scoring: CallConfig = field(default_factory=lambda: CallConfig(SCORING_MAX_TOKENS, SCORING_TEMPERATURE))
    analysis: CallConfig = field(default_factory=lambda: CallConfig(ANALYSIS_MAX_TOKENS, ANALYSIS_TEMPERATURE))
    report: CallConfig = field(default_factory=lambda: CallConfig(REPORT_MAX_TOKENS, REPORT_TEMPERATURE))
    evaluation: CallConfig = field(
        default_factory=lambda: CallConfig(EVALUATION_MAX_TOKENS, EVALUATION_TEMPERATURE)
    )
    relevance: CallConfig = field(default_factory=lambda: CallConfig(RELEVANCE_MAX_TOKENS, RELEVANCE_TEMPERATURE))


@dataclass
class PipelineConfig:
    """Selection pipeline settings."""
    title_shortlist_size: int = 30
    title_batch_size: int = 50
    quality_shortlist_size: int = 20
    image_concurrency: int = 5
    # None means unbounded; rate limiting is left to the provider
    analysis_concurrency: Optional[int] = None
    fetch_timeout: float = 10.0
    feed_timeout: float = 30.0
    run_timeout: float = 1800.0


@dataclass
class ReportConfig:
    """Daily digest settings."""
    max_articles: int = 30
    min_articles: int = 3
    skip_quality_eval: bool = False
    skip_evidence_check: bool = False
    relevance_threshold: float = 5.0
    article_base_url: str = "https://news.example.com/news"
    batch_pause: float = 2.0


@dataclass
class PathsConfig:
    """Path settings."""
    storage_dir: Path = Path("data")
    output_dir: Path = Path("digests")
    log_file: Optional[Path] = None


@dataclass
class FeedConfig:
    """One RSS/Atom feed."""
    url: str
    source: str
    region: str


DEFAULT_FEEDS = [
    FeedConfig("https://www.cnbc.com/id/10001147/device/rss/rss.html", "CNBC Business", "US"),
    FeedConfig("https://www.cnbc.com/id/20910258/device/rss/rss.html", "CNBC Economy", "US"),
    FeedConfig("https://finance.yahoo.com/news/rssindex", "Yahoo Finance", "US"),
    FeedConfig("https://www.mk.co.kr/rss/30100041/", "매일경제 경제", "KR"),
    FeedConfig("https://www.mk.co.kr/rss/50200011/", "매일경제 증권", "KR"),
    FeedConfig("https://www.hankyung.com/feed/economy", "한경 경제", "KR"),
]


@dataclass
class Settings:
    """Application settings."""

    # API key (from environment only)
    anthropic_api_key: str = ""

    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    feeds: list[FeedConfig] = field(default_factory=lambda: list(DEFAULT_FEEDS))

    timezone: str = "Asia/Seoul"
    log_level: str = "INFO"

    def validate(self) -> None:
        """Raise ConfigurationError if required settings are missing."""
        if not self.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set")
        if not self.feeds:
            raise ConfigurationError("No feeds configured")
        for name in ("title_shortlist_size", "title_batch_size", "quality_shortlist_size", "image_concurrency"):
            value = getattr(self.pipeline, name)
            if value < 1:
                raise ConfigurationError(f"pipeline.{name} must be at least 1", {"value": value})
        if self.pipeline.analysis_concurrency is not None and self.pipeline.analysis_concurrency < 1:
            raise ConfigurationError(
                "pipeline.analysis_concurrency must be at least 1",
                {"value": self.pipeline.analysis_concurrency},
            )
        for name in ("scoring", "analysis", "report", "evaluation", "relevance"):
            call: CallConfig = getattr(self.claude, name)
            if call.max_tokens < 1:
                raise ConfigurationError(f"claude.{name}.max_tokens must be at least 1", {"value": call.max_tokens})
            if not 0.0 <= call.temperature <= 1.0:
                raise ConfigurationError(
                    f"claude.{name}.temperature must be between 0 and 1", {"value": call.temperature}
                )


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return config


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_section(target: object, values: dict, section: str) -> None:
    for key, value in values.items():
        if not hasattr(target, key):
            raise ConfigurationError(f"Unknown setting {section}.{key}")
        current = getattr(target, key)
        if isinstance(current, CallConfig):
            if not isinstance(value, dict):
                raise ConfigurationError(f"{section}.{key} must be a mapping of max_tokens/temperature")
            _apply_section(current, value, f"{section}.{key}")
        else:
            setattr(target, key, value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""))

    # Apply YAML config
    if "claude" in config:
        _apply_section(settings.claude, config["claude"], "claude")

    if "pipeline" in config:
        _apply_section(settings.pipeline, config["pipeline"], "pipeline")

    if "report" in config:
        _apply_section(settings.report, config["report"], "report")

    if "paths" in config:
        for key, value in config["paths"].items():
            _apply_section(settings.paths, {key: Path(value) if value else None}, "paths")

    if "feeds" in config:
        try:
            settings.feeds = [FeedConfig(**feed) for feed in config["feeds"]]
        except TypeError as e:
            raise ConfigurationError(f"Invalid feed entry: {e}") from e

    if "timezone" in config:
        settings.timezone = config["timezone"]

    if "log_level" in config:
        settings.log_level = config["log_level"]

    # Environment overrides
    skip_eval = _env_flag("SKIP_QUALITY_EVAL")
    if skip_eval is not None:
        settings.report.skip_quality_eval = skip_eval

    skip_evidence = _env_flag("SKIP_EVIDENCE_CHECK")
    if skip_evidence is not None:
        settings.report.skip_evidence_check = skip_evidence

    tz = os.getenv("NEWS_CURATOR_TIMEZONE")
    if tz:
        settings.timezone = tz

    return settings
