"""
Telegram Alerts
===============

Telegram notification system for the token watch service.

Alert types:
- Wallet activity: a watched wallet sent or received a token
- Buy candidates: a new token passed the risk checks
- Service status: startup / shutdown / test messages
"""

import html
import logging
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import pytz
import requests

from ..config import config as app_config
from ..models import ActivityRecord, CandidateToken
from ..utils import format_timestamp

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Rate limiting constants
MIN_MESSAGE_INTERVAL_SECONDS = 1  # 1 second between any messages (Telegram limit: 30/sec)
MAX_ALERTS_PER_MINUTE = 20  # Global rate limit

ETHERSCAN_TX_URL = "https://etherscan.io/tx/"
ETHERSCAN_ADDRESS_URL = "https://etherscan.io/address/"

TRUNCATED_SUFFIX = "\n\n... (truncated)"
HTML_TAG_RE = re.compile(r"<(/?)([a-zA-Z]+)[^<>]*>")


@dataclass
class AlertConfig:
    """Configuration for alert sending."""
    bot_token: str
    chat_id: Optional[str] = None  # default destination; subscribers use their own chat
    dry_run: bool = False
    max_message_length: int = 4000
    min_message_interval: float = MIN_MESSAGE_INTERVAL_SECONDS


def _short(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}" if len(address) > 12 else address


class TelegramAlerts:
    """
    Telegram alert sender for wallet and token monitoring.

    Every subscriber is a Telegram chat, so each notification is addressed
    to the subscriber's chat id. Sending is blocking; async callers run it
    in a worker thread.
    """

    def __init__(self, config: AlertConfig, timezone_name: str = None):
        """
        Initialize Telegram alerts.

        Args:
            config: AlertConfig with bot token, default chat ID, and settings
            timezone_name: Display timezone for timestamps (default from config)
        """
        self.config = config
        self.timezone_name = timezone_name or app_config.display_timezone
        self._validate()

        # Rate limiting state
        self._last_message_time: float = 0
        self._alerts_this_minute: List[float] = []
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, dry_run: bool = False) -> "TelegramAlerts":
        """Create TelegramAlerts from the environment-backed app config."""
        return cls(AlertConfig(
            bot_token=app_config.telegram_bot_token or "",
            chat_id=app_config.telegram_chat_id,
            dry_run=dry_run,
        ))

    def _validate(self):
        """Validate configuration."""
        if not self.config.dry_run and not self.config.bot_token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required (or use --dry-run)")

    def _acquire_send_slot(self, skip_rate_limit: bool = False, wait: bool = False) -> bool:
        """
        Reserve a send slot under the rate limit and minimum interval.

        Senders run in worker threads, so the bookkeeping is done under a
        lock and the sleeps happen outside it.

        Args:
            skip_rate_limit: Ignore the per-minute limit (replies and status)
            wait: Sleep until the per-minute window has room instead of
                giving up

        Returns:
            True if the caller may send, False if rate limited
        """
        while True:
            with self._lock:
                now = time.time()

                # Clean up old timestamps (older than 1 minute)
                self._alerts_this_minute = [t for t in self._alerts_this_minute if now - t < 60]

                if skip_rate_limit or len(self._alerts_this_minute) < MAX_ALERTS_PER_MINUTE:
                    send_at = max(now, self._last_message_time + self.config.min_message_interval)
                    self._last_message_time = send_at
                    self._alerts_this_minute.append(send_at)
                    break

                if not wait:
                    logger.warning(f"Rate limited: {len(self._alerts_this_minute)} alerts in last minute")
                    return False

                delay = 60 - (now - self._alerts_this_minute[0])

            logger.info(f"Rate limited, waiting {delay:.1f}s for a send slot")
            time.sleep(delay)

        delay = send_at - time.time()
        if delay > 0:
            time.sleep(delay)
        return True

    def _truncate_message(self, text: str) -> str:
        """
        Truncate message to Telegram's character limit.

        The cut never leaves a partial tag or entity behind, and open tags
        are closed, so the result is still valid HTML for parse_mode.
        """
        limit = self.config.max_message_length
        if len(text) <= limit:
            return text

        # Room for closing tags
        cut = text[:max(limit - len(TRUNCATED_SUFFIX) - 20, 0)]

        if cut.rfind("<") > cut.rfind(">"):
            cut = cut[:cut.rfind("<")]
        if cut.rfind("&") > cut.rfind(";"):
            cut = cut[:cut.rfind("&")]

        open_tags = []
        for match in HTML_TAG_RE.finditer(cut):
            closing, tag = match.group(1), match.group(2).lower()
            if not closing:
                open_tags.append(tag)
            elif open_tags and open_tags[-1] == tag:
                open_tags.pop()

        return cut + "".join(f"</{tag}>" for tag in reversed(open_tags)) + TRUNCATED_SUFFIX

    def _send_message(
        self,
        text: str,
        chat_id: str = None,
        skip_rate_limit: bool = False,
        wait_for_slot: bool = False,
    ) -> Optional[int]:
        """
        Send a message via Telegram Bot API.

        Args:
            text: Message text (HTML formatted)
            chat_id: Destination chat (default: configured chat)
            skip_rate_limit: If True, skip rate limit check (for replies and status)
            wait_for_slot: If True, block until the rate limit allows sending
                instead of dropping the message

        Returns:
            message_id if successful, None otherwise
        """
        chat_id = chat_id or self.config.chat_id
        text = self._truncate_message(text)

        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would send Telegram message to {chat_id}:\n{text}")
            print(f"\n{'='*60}")
            print(f"[DRY RUN] Telegram message to {chat_id}:")
            print("="*60)
            print(text.replace("<b>", "").replace("</b>", "").replace("<code>", "").replace("</code>", ""))
            print("="*60 + "\n")
            # Fake message_id for dry run
            return 999999

        if not chat_id:
            logger.error("No Telegram chat id for message, dropping")
            return None

        if not self._acquire_send_slot(skip_rate_limit, wait_for_slot):
            logger.warning("Message dropped due to rate limiting")
            return None

        url = f"{TELEGRAM_API_URL}/bot{self.config.bot_token}/sendMessage"
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

        try:
            response = requests.post(url, json=payload, timeout=10)
            response.raise_for_status()

            message_id = response.json().get("result", {}).get("message_id")
            logger.info(f"Telegram message sent to {chat_id} (message_id: {message_id})")
            return message_id

        except requests.exceptions.Timeout:
            logger.error("Telegram request timed out")
            return None
        except requests.exceptions.HTTPError as e:
            # Log status code without exposing token in URL
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"Telegram HTTP error: {status_code}")
            if status_code == 429:
                logger.warning("Telegram rate limit hit (429) - backing off")
            return None
        except requests.exceptions.ConnectionError:
            logger.error("Telegram connection error - network issue")
            return None
        except requests.exceptions.RequestException:
            # Don't log exception details which may contain URL/token
            logger.error("Telegram request failed")
            return None

    # -------------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------------

    def format_wallet_activity(self, address: str, record: ActivityRecord) -> str:
        """Format a token transfer seen on a watched wallet."""
        symbol = html.escape(record.token_symbol or "?")
        name = html.escape(record.token_name or "?")
        direction = "OUT" if record.from_address == address else "IN"

        lines = [
            f"<b>New wallet activity ({direction})</b>",
            f"Wallet: <code>{address}</code>",
            f"Time: {format_timestamp(record.timestamp, self.timezone_name)}",
            f"Tx: <a href=\"{ETHERSCAN_TX_URL}{record.hash}\">{_short(record.hash)}</a>",
            f"Token: {symbol} ({name})",
            f"Contract: <code>{record.contract_address}</code>",
        ]
        return "\n".join(lines)

    def format_candidate(self, candidate: CandidateToken, now: float = None) -> str:
        """Format a token that passed the risk checks."""
        now = time.time() if now is None else now
        age_min = candidate.age(now) / 60

        lines = [
            f"<b>Buy candidate: {html.escape(candidate.display_name)}</b>",
            f"Contract: <code>{candidate.contract_address or 'unresolved'}</code>",
            f"Pair: <a href=\"{ETHERSCAN_ADDRESS_URL}{candidate.pair_address}\">{_short(candidate.pair_address)}</a>",
            f"Creator: <code>{candidate.creator or 'unknown'}</code>",
        ]
        if candidate.creation_tx_hash:
            lines.append(
                f"Creation tx: <a href=\"{ETHERSCAN_TX_URL}{candidate.creation_tx_hash}\">"
                f"{_short(candidate.creation_tx_hash)}</a>"
            )
        lines.append(f"Age: {age_min:.0f} min")

        meta = candidate.meta
        if meta is not None:
            lines.append(f"Tax: buy {meta.buy_tax:.1f}% / sell {meta.sell_tax:.1f}%")
            lines.append(f"Liquidity: ${meta.liquidity_usd:,.0f}")

        lines.append(
            f"Checks: renounced={candidate.renounced.value}, "
            f"liquidity locked={candidate.liquidity_locked.value}, "
            f"honeypot={candidate.honeypot.value}"
        )
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    def send_text(self, chat_id: str, text: str) -> Optional[int]:
        """Send a plain reply (command responses skip the global rate limit)."""
        return self._send_message(text, chat_id=chat_id, skip_rate_limit=True)

    def notify_wallet_activity(self, subscriber: str, address: str, record: ActivityRecord) -> Optional[int]:
        """
        Notify a subscriber about a new transfer on a watched wallet.

        Blocks while the per-minute limit is full instead of dropping the
        alert: the watcher's cursor is already past this transfer.

        Args:
            subscriber: Subscriber chat id
            address: Watched wallet address
            record: The new transfer

        Returns:
            message_id if sent successfully, None otherwise
        """
        return self._send_message(
            self.format_wallet_activity(address, record), chat_id=subscriber, wait_for_slot=True
        )

    def notify_candidate_to_buy(self, subscriber: str, candidate: CandidateToken) -> Optional[int]:
        """Notify an auto-snipe subscriber about a buy candidate."""
        return self._send_message(self.format_candidate(candidate), chat_id=subscriber, wait_for_slot=True)

    def send_service_status(
        self,
        status: str,
        details: str = "",
        timestamp: datetime = None,
        chat_id: str = None,
    ) -> bool:
        """
        Send service status notification.

        These are operational alerts and skip rate limiting.

        Args:
            status: Status type ("started", "stopped", "error", "test")
            details: Additional details
            timestamp: Timestamp (default: now)
            chat_id: Destination chat (default: configured chat)

        Returns:
            True if sent successfully
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)

        local = timestamp.astimezone(pytz.timezone(self.timezone_name))

        status_text = {
            "started": "Token watch started",
            "stopped": "Token watch stopped",
            "error": "Token watch error",
            "test": "Test alert",
        }.get(status, f"Status: {status}")

        lines = [f"<b>{status_text} at {local.strftime('%H:%M:%S %Z')}</b>"]
        if details:
            lines.append("")
            lines.append(details)

        return self._send_message("\n".join(lines), chat_id=chat_id, skip_rate_limit=True) is not None


def send_test_alert(
    bot_token: str = None,
    chat_id: str = None,
    dry_run: bool = False
) -> bool:
    """
    Send a test alert to verify Telegram configuration.

    Args:
        bot_token: Telegram bot token (default: from env)
        chat_id: Telegram chat ID (default: from env)
        dry_run: If True, print message instead of sending

    Returns:
        True if successful
    """
    alert_config = AlertConfig(
        bot_token=bot_token if bot_token is not None else (app_config.telegram_bot_token or ""),
        chat_id=chat_id if chat_id is not None else app_config.telegram_chat_id,
        dry_run=dry_run,
    )

    alerts = TelegramAlerts(alert_config)
    return alerts.send_service_status(
        "test",
        details="If you see this, Telegram alerts are configured correctly.",
    )
