"""
Load and validate the ohmycert YAML configuration
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_PATH = 'ohmycert.yaml'
DEFAULT_CERT_PATH_PREFIX = '/etc/traefik/ssl/'
DEFAULT_DB_NAME = 'db.json'
DEFAULT_TIMEOUT = 10
DEFAULT_MAX_WORKERS = 4

REQUIRED_KEYS = ('cert_names', 'oss_base_url', 'ssl_dir', 'tls_config_path')

# Used verbatim in bucket URLs, file names and the rendered config
CERT_NAME_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*\Z')


@dataclass
class Settings:
    cert_names: List[str]
    oss_base_url: str
    ssl_dir: str
    tls_config_path: str
    db_path: str
    cert_path_prefix: str = DEFAULT_CERT_PATH_PREFIX
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    fragment_template: Optional[str] = None


def get_config_path(path=None):
    """Return the config file path.

    Checks the explicit argument, then OHMYCERT_CONFIG.
    Falls back to ./ohmycert.yaml if nothing is set.
    """
    if path:
        return path
    env_path = os.environ.get('OHMYCERT_CONFIG')
    if env_path and env_path.strip():
        return env_path.strip()
    return DEFAULT_CONFIG_PATH


def validate_cert_names(cert_names):
    """Check that certificate names are usable as file names and unique"""
    if not isinstance(cert_names, list) or not cert_names:
        raise ConfigError("cert_names must be a non-empty list")

    seen = set()
    for name in cert_names:
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"Invalid certificate name: {name!r}")
        if name in ('.', '..') or '/' in name or os.sep in name:
            raise ConfigError(f"Certificate name must not contain a path: {name!r}")
        if not CERT_NAME_PATTERN.match(name):
            raise ConfigError(
                f"Certificate name may only contain letters, digits, '.', '_' and '-': {name!r}"
            )
        if name in seen:
            raise ConfigError(f"Duplicate certificate name: {name}")
        seen.add(name)


def _positive(data, key, default, cast):
    value = data.get(key, default)
    try:
        value = cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def settings_from_dict(data, base_dir='.'):
    """Build Settings from a parsed config mapping"""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise ConfigError(f"Missing required configuration keys: {', '.join(missing)}")

    validate_cert_names(data['cert_names'])

    prefix = str(data.get('cert_path_prefix') or DEFAULT_CERT_PATH_PREFIX)
    if not prefix.endswith('/'):
        prefix += '/'

    db_path = os.path.join(base_dir, str(data.get('db_path') or DEFAULT_DB_NAME))

    fragment_template = data.get('fragment_template')
    if fragment_template:
        fragment_template = os.path.join(base_dir, str(fragment_template))

    return Settings(
        cert_names=list(data['cert_names']),
        oss_base_url=str(data['oss_base_url']),
        ssl_dir=os.path.join(base_dir, str(data['ssl_dir'])),
        tls_config_path=os.path.join(base_dir, str(data['tls_config_path'])),
        db_path=db_path,
        cert_path_prefix=prefix,
        timeout=_positive(data, 'timeout', DEFAULT_TIMEOUT, float),
        max_workers=_positive(data, 'max_workers', DEFAULT_MAX_WORKERS, int),
        fragment_template=fragment_template,
    )


def load_settings(path=None):
    """Read the YAML config file and return validated Settings"""
    config_path = get_config_path(path)
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}")

    base_dir = os.path.dirname(os.path.abspath(config_path))
    return settings_from_dict(data or {}, base_dir=base_dir)
