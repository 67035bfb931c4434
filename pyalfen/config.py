"""
Configuration for an Alfen charger connection

Settings can be passed directly or read from the environment:

    ALFEN_HOST          - Hostname, IP or URI of the charger (scheme defaults to https)
    ALFEN_PASSWORD      - Password of the "admin" user
    ALFEN_TIMEOUT       - Seconds for the timeout on http requests (default: 5)
    ALFEN_CACHE_EXPIRE  - Seconds to keep a property snapshot (default: 5)
    ALFEN_POOL_MAXSIZE  - Pool max size for http connection re-use (default: 10)

Call dotenv.load_dotenv() first to pick them up from a .env file.
"""
import logging
import os
from dataclasses import dataclass
from typing import Tuple

from pyalfen.exceptions import InvalidConfigurationParameter
from pyalfen.properties import READ_PROPS

log = logging.getLogger(__name__)


def default_scheme(uri: str, scheme: str = "https") -> str:
    """Prefix uri with scheme:// unless it already has one, strip trailing slashes"""
    uri = uri.strip()
    if "://" not in uri:
        uri = f"{scheme}://{uri}"
    return uri.rstrip("/")


@dataclass(frozen=True)
class AlfenConfig:
    host: str
    password: str = ""
    timeout: float = 5
    cacheexpire: float = 5
    poolmaxsize: int = 10
    property_ids: Tuple[str, ...] = READ_PROPS

    def __post_init__(self):
        if not self.host or not isinstance(self.host, str):
            raise InvalidConfigurationParameter("host is required")
        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise InvalidConfigurationParameter(f"timeout must be a positive number, got {self.timeout!r}")
        if not isinstance(self.cacheexpire, (int, float)) or self.cacheexpire < 0:
            raise InvalidConfigurationParameter(f"cacheexpire must be >= 0, got {self.cacheexpire!r}")
        if not isinstance(self.poolmaxsize, int) or self.poolmaxsize < 1:
            raise InvalidConfigurationParameter(f"poolmaxsize must be a positive integer, got {self.poolmaxsize!r}")
        if not self.property_ids:
            raise InvalidConfigurationParameter("property_ids must not be empty")
        # freeze whatever sequence was given
        object.__setattr__(self, "property_ids", tuple(self.property_ids))

    @property
    def uri(self) -> str:
        return default_scheme(self.host)

    @classmethod
    def from_env(cls, **overrides) -> "AlfenConfig":
        """Build a config from ALFEN_* environment variables, keyword overrides other than None win"""
        settings = {
            "host": os.getenv("ALFEN_HOST", ""),
            "password": os.getenv("ALFEN_PASSWORD", ""),
        }
        try:
            settings["timeout"] = float(os.getenv("ALFEN_TIMEOUT", "5"))
            settings["cacheexpire"] = float(os.getenv("ALFEN_CACHE_EXPIRE", "5"))
            settings["poolmaxsize"] = int(os.getenv("ALFEN_POOL_MAXSIZE", "10"))
        except ValueError as exc:
            raise InvalidConfigurationParameter(f"invalid ALFEN_* environment value: {exc}") from exc
        settings.update({k: v for k, v in overrides.items() if v is not None})
        log.debug(f"Configuration loaded for host {settings['host']}")
        return cls(**settings)
