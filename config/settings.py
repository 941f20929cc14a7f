"""Configuration loader for the docs corpus builder and query server."""

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]

# Default configuration
DEFAULT_CONFIG = {
    'site': {
        'base_url': 'https://docs.socket.dev',
        'sitemap_path': '/sitemap.xml',
        'doc_segments': ['/docs/', '/reference/'],
        'allowed_url_prefixes': ['https://docs.socket.dev', 'https://github.com'],
    },
    'crawl': {
        'request_delay': 0.1,
        'request_timeout': 30,
        'user_agent': 'SocketDocsMCP/1.0',
        'progress_every': 20,
    },
    'corpus': {
        'path': str(BASE_DIR / 'data' / 'socket-docs.json'),
        'min_content_length': 50,
        'max_chunk_size': 1000,
    },
    'search': {
        'default_limit': 5,
        # None keeps the built-in boost table in indexer.relevance
        'boosts': None,
    },
    'logging': {
        'level': 'INFO',
        'json': False,
        'file': None,
    },
}

ENV_CONFIG_PATH = 'SOCKET_DOCS_CONFIG'
ENV_OVERRIDES = {
    'SOCKET_DOCS_CORPUS': ('corpus', 'path'),
    'SOCKET_DOCS_BASE_URL': ('site', 'base_url'),
    'SOCKET_DOCS_LOG_LEVEL': ('logging', 'level'),
    'SOCKET_DOCS_LOG_FILE': ('logging', 'file'),
}


@dataclass
class DocsConfig:
    """Typed view over the merged configuration."""
    base_url: str
    sitemap_path: str = '/sitemap.xml'
    doc_segments: List[str] = field(default_factory=lambda: ['/docs/', '/reference/'])
    allowed_url_prefixes: List[str] = field(default_factory=list)
    corpus_path: Path = BASE_DIR / 'data' / 'socket-docs.json'
    request_delay: float = 0.1
    request_timeout: float = 30
    user_agent: str = 'SocketDocsMCP/1.0'
    progress_every: int = 20
    min_content_length: int = 50
    max_chunk_size: int = 1000
    default_limit: int = 5
    boosts: Optional[List[Dict[str, Any]]] = None
    log_level: str = 'INFO'
    json_logs: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.base_url or not self.base_url.startswith('http'):
            raise ValueError(f"Invalid base URL: {self.base_url!r}")
        self.base_url = self.base_url.rstrip('/')
        self.corpus_path = Path(self.corpus_path)

        if self.request_delay < 0:
            raise ValueError("Request delay cannot be negative")
        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive")
        if self.max_chunk_size <= 0:
            raise ValueError("Max chunk size must be positive")
        if self.min_content_length < 0:
            raise ValueError("Min content length cannot be negative")
        if self.default_limit < 1:
            raise ValueError("Default search limit must be at least 1")
        if self.progress_every < 1:
            raise ValueError("Progress interval must be at least 1")

        if not self.allowed_url_prefixes:
            self.allowed_url_prefixes = [self.base_url]

    @property
    def sitemap_url(self) -> str:
        return self.base_url + '/' + self.sitemap_path.lstrip('/')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocsConfig':
        """Create DocsConfig from a nested configuration dictionary."""
        site = data.get('site', {})
        crawl = data.get('crawl', {})
        corpus = data.get('corpus', {})
        search = data.get('search', {})
        log = data.get('logging', {})
        return cls(
            base_url=site.get('base_url', ''),
            sitemap_path=site.get('sitemap_path', '/sitemap.xml'),
            doc_segments=list(site.get('doc_segments') or []),
            allowed_url_prefixes=list(site.get('allowed_url_prefixes') or []),
            corpus_path=Path(corpus.get('path', DEFAULT_CONFIG['corpus']['path'])),
            request_delay=float(crawl.get('request_delay', 0.1)),
            request_timeout=float(crawl.get('request_timeout', 30)),
            user_agent=crawl.get('user_agent', 'SocketDocsMCP/1.0'),
            progress_every=int(crawl.get('progress_every', 20)),
            min_content_length=int(corpus.get('min_content_length', 50)),
            max_chunk_size=int(corpus.get('max_chunk_size', 1000)),
            default_limit=int(search.get('default_limit', 5)),
            boosts=search.get('boosts'),
            log_level=str(log.get('level', 'INFO')),
            json_logs=bool(log.get('json', False)),
            log_file=log.get('file') or None,
        )


def _get_default_config_path() -> Optional[str]:
    """Find the configuration file, first match wins."""
    possible_paths = [
        os.environ.get(ENV_CONFIG_PATH),
        os.path.join(os.getcwd(), 'config', 'docs_config.yaml'),
        os.path.join(Path(__file__).parent, 'docs_config.yaml'),
    ]

    for path in possible_paths:
        if path and os.path.exists(path):
            return path
    return None


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config_dict(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the raw configuration: defaults, then YAML file, then environment."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    path = config_path or _get_default_config_path()

    if path and os.path.exists(path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValueError("top level must be a mapping")
            config = _deep_merge(config, file_config)
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}; using defaults")
    elif config_path:
        logger.warning(f"Config file not found at {config_path}, using defaults")

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config.setdefault(section, {})[key] = value

    return config


def load_config(config_path: Optional[str] = None) -> DocsConfig:
    """Load and validate configuration.

    Args:
        config_path: Optional explicit YAML path. When omitted the path comes
            from $SOCKET_DOCS_CONFIG, ./config/docs_config.yaml or the
            packaged default file.

    Returns:
        Validated DocsConfig
    """
    return DocsConfig.from_dict(load_config_dict(config_path))
