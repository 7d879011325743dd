"""Configuration loader for sheet feeds."""
from pathlib import Path
from typing import List, Optional, Dict, Any
import yaml
from .models import SheetFeed
from .mapper import PinnedPosting, pinned_from_config
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

VALID_FEED_TYPES = {"postings", "exams"}

DEFAULT_CONFIG_FILES = ["feeds.yml", "feeds.yaml"]


def _find_config_file() -> Optional[Path]:
    for fname in DEFAULT_CONFIG_FILES:
        if Path(fname).exists():
            return Path(fname)
    return None


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Feeds file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_feeds(path: Path = None) -> List[SheetFeed]:
    """Load and validate feeds from a YAML file.

    Args:
        path: Path to feeds.yml
    Returns:
        List of SheetFeed objects
    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a feed has an invalid type
    """
    if path is None:
        path = _find_config_file()
        if path is None:
            raise FileNotFoundError("No feeds config file found (feeds.yml or feeds.yaml)")
    data = _read_yaml(Path(path))
    # Support both top-level list and feeds key
    if isinstance(data, dict):
        feeds_data = data.get("feeds", [])
    else:
        feeds_data = data
    feeds = []
    for item in feeds_data:
        feed_type = item.get("type", "postings")
        if feed_type not in VALID_FEED_TYPES:
            raise ValueError(f"Invalid feed type: {feed_type}")
        feeds.append(SheetFeed(
            name=item.get("name", feed_type),
            url=item.get("url", ""),
            type=feed_type,
            cache_ttl=float(item.get("cache_ttl", 300)),
            timeout=float(item.get("timeout", 10)),
            max_retries=int(item.get("max_retries", 0)),
            headers=item.get("headers") or {},
        ))
    return feeds


def load_pinned(path: Path = None) -> Optional[List[PinnedPosting]]:
    """Load pinned postings from the feeds file.

    Returns:
        List of PinnedPosting, or None when the file has no 'pinned' key
    """
    if path is None:
        path = _find_config_file()
        if path is None:
            return None
    data = _read_yaml(Path(path))
    if not isinstance(data, dict) or "pinned" not in data:
        return None
    return pinned_from_config(data["pinned"])


class Config:
    """Configuration manager with environment variable and .env file support."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Optional path to .env file
        """
        # Load .env file if it exists (fallback for local development)
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        elif os.path.exists(".env"):
            load_dotenv(".env")
            logger.info("Loaded configuration from .env file")
        else:
            logger.debug("No .env file found, using environment variables only")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value from the environment.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return os.getenv(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, str(default).lower())
        return str(value).lower() in ('true', '1', 'yes', 'on')

    def get_int(self, key: str, default: int = 0) -> int:
        """Get integer configuration value.

        Args:
            key: Configuration key
            default: Default integer value

        Returns:
            Integer value
        """
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value for {key}: {value}, using default {default}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key, str(default))
        try:
            return float(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid float value for {key}: {value}, using default {default}")
            return default

    def get_feed_config(self) -> Dict[str, Any]:
        """Get sheet feed configuration.

        Returns:
            Feed configuration dictionary
        """
        return {
            'sheet_url': self.get('SHEET_URL'),
            'exams_sheet_url': self.get('EXAMS_SHEET_URL'),
            'cache_ttl': self.get_float('CACHE_TTL_SECONDS', 300.0),
            'timeout': self.get_float('FETCH_TIMEOUT', 10.0),
            'max_retries': self.get_int('FETCH_MAX_RETRIES', 0),
        }

    def get_view_config(self) -> Dict[str, Any]:
        """Get derived view configuration.

        Returns:
            View configuration dictionary
        """
        return {
            'latest_limit': self.get_int('LATEST_LIMIT', 4),
            'ticker_limit': self.get_int('TICKER_LIMIT', 10),
        }

    def get_web_config(self) -> Dict[str, Any]:
        """Get web server configuration.

        Returns:
            Web server configuration dictionary
        """
        return {
            'host': self.get('WEB_HOST', '127.0.0.1'),
            'port': self.get_int('WEB_PORT', 8000),
            'reload': self.get_bool('WEB_RELOAD', False),
        }

    def feeds_from_env(self) -> List[SheetFeed]:
        """Build feeds from SHEET_URL / EXAMS_SHEET_URL."""
        feed_config = self.get_feed_config()
        feeds = []
        for feed_type, url_key in (("postings", "sheet_url"), ("exams", "exams_sheet_url")):
            url = feed_config[url_key]
            if not url:
                continue
            feeds.append(SheetFeed(
                name=feed_type,
                url=url,
                type=feed_type,
                cache_ttl=feed_config['cache_ttl'],
                timeout=feed_config['timeout'],
                max_retries=feed_config['max_retries'],
            ))
        return feeds


def resolve_feeds(path: Optional[Path] = None, env: Optional[Config] = None) -> List[SheetFeed]:
    """Feeds from the YAML file when one exists, otherwise from the environment."""
    if path is not None or _find_config_file() is not None:
        return load_feeds(path)
    return (env or config).feeds_from_env()


def find_feed(feeds: List[SheetFeed], feed_type: str) -> Optional[SheetFeed]:
    """First feed of the given type, if any."""
    return next((feed for feed in feeds if feed.type == feed_type), None)


# Global configuration instance
config = Config()
