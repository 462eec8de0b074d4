"""
Configuration for tokenwatch

All settings in one place for easy tuning. Secrets come from the
environment (a .env file at the project root is loaded if present).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set

from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


# Well-known burn addresses and liquidity lockers on Ethereum mainnet
BURN_ADDRESSES = {
    "0x0000000000000000000000000000000000000000",
    "0x000000000000000000000000000000000000dead",
    "0x0000000000000000000000000000000000000001",
}

LOCKER_ADDRESSES = {
    "0x663a5c229c09b049e36dcc11a9b0d4a8eb9db214",  # Unicrypt V2
    "0xe2fe530c047f2d85298b07d9333c05737f1435fb",  # Team Finance
    "0x71b5759d73262fbb223956913ecf4ecc51057641",  # PinkLock V2
    "0xdba68f07d1b7ca219f78ae8582c213d975c25caf",  # Team Finance V3
}


@dataclass
class Config:
    """All configuration settings."""

    # -------------------------------------------------------------------------
    # Loop cadence (seconds)
    # -------------------------------------------------------------------------
    watch_interval_sec: float = 60.0
    discovery_interval_sec: float = 60.0
    budget_tick_interval_sec: float = 24 * 60 * 60

    # Long-poll timeout for Telegram getUpdates
    command_poll_timeout_sec: int = 25

    # -------------------------------------------------------------------------
    # Wallet watching
    # -------------------------------------------------------------------------
    # Token transfers fetched per watched address per tick
    transfers_page_size: int = 25

    # -------------------------------------------------------------------------
    # Token discovery
    # -------------------------------------------------------------------------
    # Uniswap V2 factory: every internal create2 is a new pair
    factory_address: str = "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"

    # Internal transactions fetched from the factory per tick
    discovery_fetch_count: int = 100

    # Etherscan getcontractcreation accepts at most 5 addresses
    creation_lookup_batch_size: int = 5

    # -------------------------------------------------------------------------
    # Risk classification
    # -------------------------------------------------------------------------
    # Buy/sell tax above this (percent) marks a token as a honeypot
    max_tax_pct: float = 5.0

    # Candidates not renounced within this window are dropped
    candidate_ttl_sec: int = 2 * 60 * 60

    # Normal transactions of the creator scanned for renounceOwnership
    renounce_scan_page_size: int = 50

    # Top holders compared against the locker/burn allow-list
    top_holders_limit: int = 10

    liquidity_lockers: Set[str] = field(
        default_factory=lambda: set(BURN_ADDRESSES) | set(LOCKER_ADDRESSES)
    )

    # -------------------------------------------------------------------------
    # Compute budget (Alchemy compute units per month)
    # -------------------------------------------------------------------------
    compute_unit_capacity: int = 300_000_000

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    etherscan_url: str = "https://api.etherscan.io/v2/api"
    etherscan_chain_id: int = 1
    honeypot_url: str = "https://api.honeypot.is/v2/IsHoneypot"
    chainbase_url: str = "https://api.chainbase.online/v1"
    chainbase_chain_id: int = 1
    alchemy_url: str = "https://eth-mainnet.g.alchemy.com/v2"

    # Etherscan free tier allows 5 calls/sec - keep concurrency low
    max_concurrent_requests: int = 3

    # Delay between API requests (seconds)
    request_delay_sec: float = 0.25

    # Rate limiting backoff (seconds)
    rate_limit_backoff_sec: float = 2.0
    max_retries: int = 3

    # Total timeout per HTTP request (seconds)
    request_timeout_sec: float = 30.0

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------
    display_timezone: str = "UTC"

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = "INFO"
    log_file: str = "./logs/monitor.log"

    # -------------------------------------------------------------------------
    # Secrets (from environment)
    # -------------------------------------------------------------------------
    @property
    def telegram_bot_token(self) -> Optional[str]:
        return os.environ.get("TELEGRAM_BOT_TOKEN")

    @property
    def telegram_chat_id(self) -> Optional[str]:
        return os.environ.get("TELEGRAM_CHAT_ID")

    @property
    def etherscan_api_key(self) -> Optional[str]:
        return os.environ.get("ETHERSCAN_API")

    @property
    def alchemy_api_key(self) -> Optional[str]:
        return os.environ.get("ALCHEMY_API")

    @property
    def chainbase_api_key(self) -> Optional[str]:
        return os.environ.get("CHAINBASE_API")

    @property
    def wallet_address(self) -> Optional[str]:
        return os.environ.get("ETH_ADDRESS")

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    def missing_credentials(self, dry_run: bool = False) -> List[str]:
        """
        List the required environment variables that are not set.

        Args:
            dry_run: If True, Telegram credentials are not required

        Returns:
            Names of missing variables
        """
        required = {
            "ETHERSCAN_API": self.etherscan_api_key,
            "ALCHEMY_API": self.alchemy_api_key,
            "CHAINBASE_API": self.chainbase_api_key,
        }
        if not dry_run:
            required["TELEGRAM_BOT_TOKEN"] = self.telegram_bot_token

        return [name for name, value in required.items() if not value]

    def validate(self, dry_run: bool = False):
        """Raise ValueError if required credentials are missing."""
        missing = self.missing_credentials(dry_run)
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


# Global config instance
config = Config()
