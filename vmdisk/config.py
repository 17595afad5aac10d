"""Client configuration: API endpoint, credentials, retry and polling settings."""

import logging
import os
import sys
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.linode.com"
DEFAULT_API_VERSION = "v4"
DEFAULT_CONFIG_PATH = "~/.config/vmdisk.yaml"
DEFAULT_PROFILE = "default"


@dataclass
class ClientConfig:
    """Settings handed to ComputeClient at construction.

    Retry and backoff apply to every API request the client makes; the
    event poll interval applies to event pollers and status waiters.
    Requests go to ``{api_url}/{api_version}``.
    """

    token: str
    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    ua_prefix: str = ""
    max_retries: int = 3
    min_retry_delay_ms: int = 100
    max_retry_delay_ms: int = 2000
    event_poll_ms: int = 4000
    request_timeout: float = 60.0

    @property
    def base_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.api_version.strip('/')}"

    @property
    def event_poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.event_poll_ms / 1000

    @property
    def min_retry_delay(self) -> float:
        return self.min_retry_delay_ms / 1000

    @property
    def max_retry_delay(self) -> float:
        return self.max_retry_delay_ms / 1000


def load_profile(config_path: str = DEFAULT_CONFIG_PATH, profile: str = DEFAULT_PROFILE) -> dict:
    """Load one profile section from a YAML config file.

    A missing file yields an empty dict. A malformed file or a non-mapping
    profile is fatal.
    """
    config_path = os.path.expanduser(os.path.expandvars(config_path))
    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config: {e}")
        sys.exit(1)

    if not isinstance(config, dict):
        logger.error(f"Error: config file '{config_path}' must contain a mapping of profiles.")
        sys.exit(1)

    section = config.get(profile, {})
    if not isinstance(section, dict):
        logger.error(f"Error: profile '{profile}' in '{config_path}' must be a mapping.")
        sys.exit(1)
    return section


def _env_int(name):
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}")
        return None


def resolve_client_config(
    token=None,
    api_url=None,
    api_version=None,
    config_path=DEFAULT_CONFIG_PATH,
    profile=DEFAULT_PROFILE,
) -> ClientConfig:
    """Build a ClientConfig from CLI flags, environment, and the profile file.

    Precedence: explicit arguments, then LINODE_* env vars, then the YAML
    profile, then defaults.

    Raises:
        ValueError: if no API token can be found.
    """
    file_cfg = load_profile(config_path, profile)

    token = token or os.environ.get("LINODE_TOKEN") or file_cfg.get("token")
    if not token:
        raise ValueError("API token required. Use --token, set LINODE_TOKEN, or add 'token' to the config file.")

    event_poll_ms = _env_int("LINODE_EVENT_POLL_MS")
    if event_poll_ms is None:
        event_poll_ms = file_cfg.get("event_poll_ms", ClientConfig.event_poll_ms)

    return ClientConfig(
        token=token,
        api_url=api_url or os.environ.get("LINODE_URL") or file_cfg.get("url") or DEFAULT_API_URL,
        api_version=api_version
        or os.environ.get("LINODE_API_VERSION")
        or file_cfg.get("api_version")
        or DEFAULT_API_VERSION,
        ua_prefix=os.environ.get("LINODE_UA_PREFIX") or file_cfg.get("ua_prefix", ""),
        max_retries=int(file_cfg.get("max_retries", ClientConfig.max_retries)),
        min_retry_delay_ms=int(file_cfg.get("min_retry_delay_ms", ClientConfig.min_retry_delay_ms)),
        max_retry_delay_ms=int(file_cfg.get("max_retry_delay_ms", ClientConfig.max_retry_delay_ms)),
        event_poll_ms=int(event_poll_ms),
        request_timeout=float(file_cfg.get("request_timeout", ClientConfig.request_timeout)),
    )
