"""
bptf-prices - Configuration
All tunable constants in one place.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
load_dotenv()

# ─────────────────────────────────────────────
# backpack.tf Web API
# ─────────────────────────────────────────────
BPTF_API_BASE = "https://backpack.tf/api"

CURRENCIES_PATH = "IGetCurrencies/v1"
PRICE_HISTORY_PATH = "IGetPriceHistory/v1"
PRICES_PATH = "IGetPrices/v4"
SPECIAL_ITEMS_PATH = "IGetSpecialItems/v1"

# Environment variable holding the developer API key
API_KEY_ENV = "BPTF_API_KEY"

# ─────────────────────────────────────────────
# Request defaults
# ─────────────────────────────────────────────
TF2_APPID = 440  # the only appid the economy endpoints serve

DEFAULT_RAW = 1
DEFAULT_ITEM = "Team Captain"
DEFAULT_QUALITY = "Unique"
DEFAULT_TRADABLE = "Tradable"
DEFAULT_CRAFTABLE = "Craftable"
DEFAULT_PRICEINDEX = 0

# IGetPrices returns everything updated at or after this UNIX time
DEFAULT_PRICES_SINCE = 1611752400

RAW_VALUES = (1, 2)

ITEM_QUALITIES = (
    "Normal",
    "Genuine",
    "Vintage",
    "Unusual",
    "Unique",
    "Community",
    "Valve",
    "Self-Made",
    "Strange",
    "Haunted",
    "Collector's",
    "Decorated Weapon",
)

TRADABLE_VALUES = ("Tradable", "Non-Tradable")
CRAFTABLE_VALUES = ("Craftable", "Non-Craftable")

# ─────────────────────────────────────────────
# Transport
# ─────────────────────────────────────────────
REQUEST_TIMEOUT = 20      # seconds per GET
MAX_WORKERS = None        # None: one thread per call; an int bounds in-flight requests
USER_AGENT = "bptf-prices/1.0"

# ─────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────
LOG_LEVEL = "INFO"
LOG_FILE = Path(os.path.expanduser("~")) / ".bptf-prices" / "bptf-prices.log"


@dataclass(frozen=True)
class ClientConfig:
    """Settings for one EconomyClient. Immutable once built.

    max_workers: None (default) starts a thread per call, so in-flight
    requests never wait on each other. An int caps the client at that many
    concurrent requests; further calls queue until a worker frees up,
    which can take up to timeout_sec per slow request.
    """

    api_key: Optional[str] = None
    api_base: str = BPTF_API_BASE
    timeout_sec: float = REQUEST_TIMEOUT
    max_workers: Optional[int] = MAX_WORKERS
    user_agent: str = USER_AGENT

    def __repr__(self) -> str:
        key = "set" if self.api_key else None
        return (f"ClientConfig(api_key={key!r}, api_base={self.api_base!r}, "
                f"timeout_sec={self.timeout_sec!r}, max_workers={self.max_workers!r})")

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build a config with the key taken from BPTF_API_KEY (.env aware).

        A missing or blank key is stored as None; requests are still sent
        and the upstream service decides whether to reject them.
        """
        key = os.getenv(API_KEY_ENV, "").strip() or None
        overrides.setdefault("api_key", key)
        return cls(**overrides)
