"""
KJV OSIS Importer - Configuration

Centralized configuration management for the importer.
Uses environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Any, Optional

from dotenv import load_dotenv

from core.errors import KjvConfigError
from observability.logging import LoggingConfig

# Load environment variables from .env file
load_dotenv()


# Pinned revision of the CrossWire KJV module source
DEFAULT_OSIS_URL = (
    "https://gitlab.com/crosswire-bible-society/kjv/-/raw/"
    "d490be7e34762deb2c76cb2c1306d4808e27890d/kjvfull.xml"
)


@dataclass
class SourceConfig:
    """Source document location and fetch behaviour."""
    osis_url: str = field(default_factory=lambda: os.getenv("KJV_OSIS_URL", DEFAULT_OSIS_URL))
    source_dir: Path = field(default_factory=lambda: Path(os.getenv("SOURCE_DIR", "./source")))
    filename: str = field(default_factory=lambda: os.getenv("SOURCE_FILENAME", "kjvfull.xml"))
    user_agent: str = field(default_factory=lambda: os.getenv("FETCH_USER_AGENT", "Mozilla/5.0"))
    timeout: float = field(default_factory=lambda: float(os.getenv("FETCH_TIMEOUT", "60")))
    max_attempts: int = field(default_factory=lambda: int(os.getenv("FETCH_MAX_ATTEMPTS", "3")))
    base_delay: float = field(default_factory=lambda: float(os.getenv("FETCH_BASE_DELAY", "1.0")))

    @property
    def cache_path(self) -> Path:
        """Location of the cached source document."""
        return self.source_dir / self.filename


@dataclass
class ParserConfig:
    """OSIS conversion settings."""
    # Prefix given to Strong's numbers that carry no H/G letter
    default_strongs_prefix: str = field(
        default_factory=lambda: os.getenv("STRONGS_DEFAULT_PREFIX", "H").upper()
    )
    chunk_size: int = field(default_factory=lambda: int(os.getenv("PARSER_CHUNK_SIZE", "65536")))


@dataclass
class StoreConfig:
    """Verse store location."""
    data_dir: Path = field(default_factory=lambda: Path(os.getenv("DATA_DIR", "./data")))
    edition: str = field(default_factory=lambda: os.getenv("EDITION", "crosswire-KJV"))

    @property
    def edition_dir(self) -> Path:
        return self.data_dir / self.edition


@dataclass
class Config:
    """Main configuration class combining all sub-configs."""
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    source: SourceConfig = field(default_factory=SourceConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if self.parser.default_strongs_prefix not in ("H", "G"):
            errors.append("STRONGS_DEFAULT_PREFIX must be H or G")
        if self.parser.chunk_size < 1:
            errors.append("PARSER_CHUNK_SIZE must be >= 1")
        if self.source.max_attempts < 1:
            errors.append("FETCH_MAX_ATTEMPTS must be >= 1")
        if self.source.timeout <= 0:
            errors.append("FETCH_TIMEOUT must be > 0")
        if not self.store.edition:
            errors.append("EDITION is required")
        if self.logging.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"LOG_LEVEL {self.logging.level!r} is not a logging level")
        return errors

    def ensure_valid(self) -> "Config":
        """Raise KjvConfigError when validate() reports problems."""
        errors = self.validate()
        if errors:
            raise KjvConfigError(
                "Invalid configuration: " + "; ".join(errors),
                suggestions=["Check the environment or .env file"],
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "debug": self.debug,
            "source": {
                "osis_url": self.source.osis_url,
                "cache_path": str(self.source.cache_path),
                "timeout": self.source.timeout,
                "max_attempts": self.source.max_attempts,
            },
            "parser": {
                "default_strongs_prefix": self.parser.default_strongs_prefix,
                "chunk_size": self.parser.chunk_size,
            },
            "store": {
                "data_dir": str(self.store.data_dir),
                "edition": self.store.edition,
            },
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
                "log_to_file": self.logging.log_to_file,
            },
        }


# Singleton configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    load_dotenv(override=True)
    _config = Config()
    return _config


# Edition description written next to the verse files
EDITION_METADATA: Dict[str, Any] = {
    "abbreviation": "KJV",
    "name": "King James Version",
    "language": "English",
    "license": "Public Domain",
    "source": "CrossWire Bible Society",
    "urls": ["https://crosswire.org/", "https://gitlab.com/crosswire-bible-society/kjv"],
}
