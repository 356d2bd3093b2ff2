import os
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

@dataclass
class SearchEngineConfig:
    """Search engine used to discover candidate pages"""
    search_url: str = "https://www.google.com/search?q="
    site_filter: str = "site:stackoverflow.com"
    user_agent: str = ""  # Empty means a random browser UA per fetcher

@dataclass
class FetchConfig:
    """HTTP fetch behaviour"""
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    max_content_size: int = 10 * 1024 * 1024  # 10MB max

@dataclass
class MarkerConfig:
    """Markup patterns for link and content extraction (regular expressions)"""
    # Search results page
    result_marker: str = r'<h3 class="r">'
    anchor_href: str = r'<a\s[^>]*?(?<=\s)href="([^"]*)"'
    href_delimiter: str = "q="

    # Question/answer page
    question_marker: str = r'<div[^>]*\bid="question"'
    question_body_marker: str = r'<(?:td|div)[^>]*\bclass="[^"]*\bpostcell\b'
    answer_marker: str = r'<div[^>]*\bid="answer-\d+"'
    answer_body_marker: str = r'<(?:td|div)[^>]*\bclass="[^"]*\banswercell\b'
    post_text_marker: str = r'<div[^>]*\bclass="[^"]*\b(?:post-text|js-post-body)\b[^"]*"[^>]*>'

@dataclass
class SessionConfig:
    """Defaults for search sessions"""
    include_question: bool = False
    answer_count: int = 1  # Advisory, the extractor always keeps every answer
    max_cursor: int = 10

@dataclass
class ServerConfig:
    """HTTP/MCP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8001
    debug: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    max_sessions: int = 1000  # HTTP sessions kept before the oldest is evicted

@dataclass
class AppConfig:
    """Main configuration"""
    search_engine: SearchEngineConfig = field(default_factory=SearchEngineConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

def _env_flag(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')

class Settings:
    """Central configuration manager"""

    def __init__(self):
        self.config = AppConfig()
        self._load_from_environment()

    def _load_from_environment(self):
        """Load configuration overrides from environment variables"""

        # Search engine
        if os.getenv('SEARCH_URL'):
            self.config.search_engine.search_url = os.getenv('SEARCH_URL')

        if os.getenv('SITE_FILTER'):
            self.config.search_engine.site_filter = os.getenv('SITE_FILTER')

        if os.getenv('USER_AGENT'):
            self.config.search_engine.user_agent = os.getenv('USER_AGENT')

        # Fetching
        if os.getenv('FETCH_TIMEOUT'):
            try:
                self.config.fetch.timeout = float(os.getenv('FETCH_TIMEOUT'))
            except ValueError:
                logger.warning("Invalid FETCH_TIMEOUT, using default value")

        if os.getenv('FETCH_RETRIES'):
            try:
                self.config.fetch.max_retries = int(os.getenv('FETCH_RETRIES'))
            except ValueError:
                logger.warning("Invalid FETCH_RETRIES, using default value")

        # Session defaults
        if os.getenv('INCLUDE_QUESTION'):
            self.config.session.include_question = _env_flag(os.getenv('INCLUDE_QUESTION'))

        if os.getenv('ANSWER_COUNT'):
            try:
                self.config.session.answer_count = int(os.getenv('ANSWER_COUNT'))
            except ValueError:
                logger.warning("Invalid ANSWER_COUNT, using default value")

        if os.getenv('MAX_CURSOR'):
            try:
                self.config.session.max_cursor = int(os.getenv('MAX_CURSOR'))
            except ValueError:
                logger.warning("Invalid MAX_CURSOR, using default value")

        # Server
        if os.getenv('MCP_HOST'):
            self.config.server.host = os.getenv('MCP_HOST')

        if os.getenv('MCP_PORT'):
            try:
                self.config.server.port = int(os.getenv('MCP_PORT'))
            except ValueError:
                logger.warning("Invalid MCP_PORT, using default value")

        if os.getenv('MAX_SESSIONS'):
            try:
                self.config.server.max_sessions = int(os.getenv('MAX_SESSIONS'))
            except ValueError:
                logger.warning("Invalid MAX_SESSIONS, using default value")

        if os.getenv('MCP_DEBUG'):
            self.config.server.debug = _env_flag(os.getenv('MCP_DEBUG'))

        # Logging
        if os.getenv('LOG_LEVEL'):
            self.config.server.log_level = os.getenv('LOG_LEVEL').upper()

        if os.getenv('LOG_FILE'):
            self.config.server.log_file = os.getenv('LOG_FILE')

    def setup_logging(self):
        """Configure logging from the current settings"""
        log_level = getattr(logging, self.config.server.log_level, logging.INFO)

        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        logging.basicConfig(
            level=log_level,
            format=log_format,
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        if self.config.server.log_file:
            file_handler = logging.FileHandler(self.config.server.log_file)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(log_format))

            for logger_name in ['__main__', 'stackanswers']:
                logging.getLogger(logger_name).addHandler(file_handler)

        # Keep third-party libraries quiet
        external_loggers = {
            'httpx': logging.WARNING,
            'httpcore': logging.WARNING,
            'bs4': logging.WARNING
        }

        for logger_name, level in external_loggers.items():
            logging.getLogger(logger_name).setLevel(level)

    def validate_config(self) -> bool:
        """Validate the configuration"""
        errors = []

        if not (1 <= self.config.server.port <= 65535):
            errors.append(f"Invalid port: {self.config.server.port}")

        if not self.config.search_engine.search_url.startswith(('http://', 'https://')):
            errors.append(f"Invalid search URL: {self.config.search_engine.search_url}")

        if self.config.fetch.timeout <= 0:
            errors.append("fetch timeout must be positive")

        if self.config.fetch.max_retries < 1:
            errors.append("fetch max_retries must be at least 1")

        if self.config.session.answer_count < 1:
            errors.append("answer_count must be at least 1")

        if self.config.server.max_sessions < 1:
            errors.append("max_sessions must be at least 1")

        if self.config.session.max_cursor < 0:
            errors.append("max_cursor cannot be negative")

        if errors:
            for error in errors:
                logger.error(f"Invalid configuration: {error}")
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as a dictionary (for debugging)"""
        return {
            'search_engine': {
                'search_url': self.config.search_engine.search_url,
                'site_filter': self.config.search_engine.site_filter
            },
            'fetch': {
                'timeout': self.config.fetch.timeout,
                'max_retries': self.config.fetch.max_retries
            },
            'session': {
                'include_question': self.config.session.include_question,
                'answer_count': self.config.session.answer_count,
                'max_cursor': self.config.session.max_cursor
            },
            'server': {
                'host': self.config.server.host,
                'port': self.config.server.port,
                'debug': self.config.server.debug,
                'log_level': self.config.server.log_level
            }
        }

# Global instance
settings = Settings()
