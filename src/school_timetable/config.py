"""
Configuration for the timetable seeder.
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from .models import EndTimePolicy, ExtractionMode, FourTokenPolicy, ParseOptions

DEFAULT_BASE_URL = (
    "https://orario.itismeucci.edu.it/2024-2025/"
    "2025-04-26%20-%20Orario%20a%207%20ore/"
)
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def load_env_file(path: Path) -> None:
    with path.open("r", encoding="utf-8") as env_file:
        for line in env_file:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            if "=" not in stripped:
                continue

            key, value = stripped.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip().strip('"\''))


@dataclass
class Config:
    """Application configuration."""

    # Database (only needed when lessons are persisted)
    database_url: Optional[str] = None

    # Timetable source
    base_url: str = DEFAULT_BASE_URL
    index_page: str = "index.html"

    # HTTP client
    request_timeout: int = 10
    user_agent: str = DEFAULT_USER_AGENT

    # Parsing
    max_concurrent_parses: int = 5
    end_time_policy: EndTimePolicy = EndTimePolicy.FIXED
    extraction_mode: ExtractionMode = ExtractionMode.LINKS
    four_token_policy: FourTokenPolicy = FourTokenPolicy.HEURISTIC

    # Logging
    log_level: str = "INFO"

    @property
    def index_url(self) -> str:
        """URL of the page listing every class timetable."""
        return urljoin(self.base_url, self.index_page)

    def parse_options(self) -> ParseOptions:
        return ParseOptions(
            end_time_policy=self.end_time_policy,
            extraction_mode=self.extraction_mode,
            four_token_policy=self.four_token_policy,
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Build the configuration from environment variables (and ./.env)."""
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_env_file(env_path)

        base_url = os.getenv("TIMETABLE_BASE_URL", DEFAULT_BASE_URL)
        if not base_url.endswith("/"):
            base_url += "/"

        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            base_url=base_url,
            index_page=os.getenv("TIMETABLE_INDEX_PAGE", "index.html"),
            request_timeout=int(os.getenv("REQUEST_TIMEOUT", "10")),
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            max_concurrent_parses=int(os.getenv("MAX_CONCURRENT_PARSES", "5")),
            end_time_policy=EndTimePolicy(os.getenv("END_TIME_POLICY", "fixed").lower()),
            extraction_mode=ExtractionMode(os.getenv("EXTRACTION_MODE", "links").lower()),
            four_token_policy=FourTokenPolicy(os.getenv("FOUR_TOKEN_POLICY", "heuristic").lower()),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Global configuration instance
config: Optional[Config] = None


def get_config() -> Config:
    """Return the global configuration."""
    global config
    if config is None:
        config = Config.from_env()
    return config
