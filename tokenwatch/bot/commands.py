"""
Telegram Command Bot
====================

Long-polls Telegram getUpdates and answers chat commands.

Commands:
    /help                      list commands
    /watch <addr> [<addr>...]  replace this chat's watched wallets
    /snipe on|off              buy-candidate alerts for this chat
    /hidezero on|off           hide zero balances in /tokens
    /balance                   operator wallet ETH balance
    /tokens                    operator wallet ERC-20 balances
    /gas                       gas price and swap fee estimates
    /budget                    Alchemy compute units used this month
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, TYPE_CHECKING

from ..api.base import AsyncAPIClient
from ..config import config
from ..core.subscribers import SubscriberRegistry

if TYPE_CHECKING:
    from ..alerts.telegram import TelegramAlerts
    from ..api.alchemy import AlchemyClient
    from ..api.etherscan import EtherscanClient
    from ..api.honeypot import HoneypotClient
    from ..core.budget import ComputeBudget

logger = logging.getLogger(__name__)

# Gas used by a swap, from cryptoneur.xyz gas fee calculator
UNISWAP_V2_SWAP_GAS = 152_809
UNISWAP_V3_SWAP_GAS = 184_523
FEE_MARGIN = 1.03

HELP_TEXT = "\n".join([
    "These commands are supported:",
    "",
    "/help - list available commands",
    "/watch <wallet> [<wallet> ...] - start monitoring ethereum wallets",
    "/snipe on|off - alerts for new tokens that pass the risk checks",
    "/hidezero on|off - hide zero balances in /tokens",
    "/balance - get wallet ETH balance",
    "/tokens - get wallet ERC-20 token balances",
    "/gas - get current eth gas",
    "/budget - Alchemy compute units used this month",
])
UNKNOWN_COMMAND_TEXT = "Type /help to see available commands."
INVALID_WALLETS_TEXT = "Watch wallets cancelled: submitted wallets are incorrect"
ERROR_TEXT = "Something went wrong\n\nPlease try again"

ON_OFF = {"on": True, "off": False}


def estimate_swap_fees(gwei: float, eth_price: float) -> Dict[str, float]:
    """USD cost of a Uniswap V2 and V3 swap at the given gas price."""
    eth_per_gas = gwei * 1e-9
    return {
        "v2": eth_per_gas * eth_price * UNISWAP_V2_SWAP_GAS * FEE_MARGIN,
        "v3": eth_per_gas * eth_price * UNISWAP_V3_SWAP_GAS * FEE_MARGIN,
    }


def parse_command(text: str):
    """
    Split a message into (command, args).

    Returns:
        ("/cmd", [args]) with the @botname suffix removed, or (None, []) if
        the text is not a command
    """
    parts = (text or "").strip().split()
    if not parts or not parts[0].startswith("/"):
        return None, []
    return parts[0].lower().split("@")[0], parts[1:]


class TelegramUpdates(AsyncAPIClient):
    """getUpdates long-poll client."""

    name = "telegram"

    def __init__(self, bot_token: str, **kwargs):
        super().__init__(**kwargs)
        self.bot_token = bot_token

    async def get_updates(self, offset: int, timeout: int) -> Optional[List[dict]]:
        data = await self._request(
            "GET",
            f"https://api.telegram.org/bot{self.bot_token}/getUpdates",
            params={"offset": offset, "timeout": timeout, "allowed_updates": '["message"]'},
        )
        if not isinstance(data, dict) or not data.get("ok"):
            return None
        return data.get("result", [])


class CommandBot:
    """
    Chat command front-end.

    handle_command() builds the reply text and never talks to Telegram, so
    the command logic can be used without a bot token.
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        alerts: "TelegramAlerts",
        etherscan: "EtherscanClient",
        alchemy: "AlchemyClient",
        honeypot: "HoneypotClient",
        budget: "ComputeBudget",
        updates: TelegramUpdates = None,
        wallet_address: str = None,
        poll_timeout: int = None,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        self.registry = registry
        self.alerts = alerts
        self.etherscan = etherscan
        self.alchemy = alchemy
        self.honeypot = honeypot
        self.budget = budget
        self.updates = updates
        self.wallet_address = wallet_address if wallet_address is not None else config.wallet_address
        self.poll_timeout = poll_timeout or config.command_poll_timeout_sec
        self._sleep = sleep

        self.offset = 0
        self.running = False

        self.commands: Dict[str, Callable[[str, List[str]], Awaitable[str]]] = {
            "/help": self._help,
            "/start": self._help,
            "/watch": self._watch,
            "/snipe": self._snipe,
            "/hidezero": self._hidezero,
            "/balance": self._balance,
            "/tokens": self._tokens,
            "/gas": self._gas,
            "/budget": self._budget,
        }

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def handle_command(self, chat_id: str, text: str) -> str:
        """
        Build the reply to a chat message.

        Args:
            chat_id: Telegram chat id (the subscriber)
            text: Message text

        Returns:
            Reply text
        """
        cmd, args = parse_command(text)
        handler = self.commands.get(cmd)
        if handler is None:
            return UNKNOWN_COMMAND_TEXT

        logger.info(f"Command {cmd} from chat {chat_id}")
        return await handler(chat_id, args)

    async def process_update(self, update: dict) -> Optional[str]:
        """Handle one getUpdates entry and send the reply."""
        self.offset = max(self.offset, update.get("update_id", 0) + 1)

        message = update.get("message") or {}
        text = message.get("text", "")
        chat_id = str((message.get("chat") or {}).get("id", ""))
        if not chat_id or not text:
            return None

        try:
            reply = await self.handle_command(chat_id, text)
        except Exception as e:
            logger.exception(f"Command {text.split()[0]!r} from chat {chat_id} failed: {e}")
            reply = ERROR_TEXT

        await asyncio.to_thread(self.alerts.send_text, chat_id, reply)
        return reply

    async def run(self):
        """Poll for updates until stopped."""
        if self.updates is None:
            raise RuntimeError("CommandBot.run() needs a TelegramUpdates client")

        self.running = True
        logger.info("Command listener started")

        while self.running:
            updates = await self.updates.get_updates(self.offset, self.poll_timeout)
            if updates is None:
                await self._sleep(5)
                continue

            for update in updates:
                try:
                    await self.process_update(update)
                except Exception as e:
                    logger.error(f"Failed to handle update {update.get('update_id')}: {e}")

        logger.info("Command listener stopped")

    def stop(self):
        self.running = False

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def _help(self, chat_id: str, args: List[str]) -> str:
        return HELP_TEXT

    async def _watch(self, chat_id: str, args: List[str]) -> str:
        accepted = await self.registry.set_watch_list(chat_id, args)
        if not accepted:
            return INVALID_WALLETS_TEXT

        lines = ["Currently watched wallets:", ""]
        lines.extend(f"{i}. {address}" for i, address in enumerate(accepted, 1))
        return "\n".join(lines)

    async def _snipe(self, chat_id: str, args: List[str]) -> str:
        enabled = ON_OFF.get(args[0].lower()) if args else None
        if enabled is None:
            settings = await self.registry.get_settings(chat_id)
            state = "on" if settings.auto_snipe else "off"
            return f"Auto-snipe is {state}. Usage: /snipe on|off"

        await self.registry.set_auto_snipe(chat_id, enabled)
        return f"Auto-snipe {'enabled' if enabled else 'disabled'}"

    async def _hidezero(self, chat_id: str, args: List[str]) -> str:
        enabled = ON_OFF.get(args[0].lower()) if args else None
        if enabled is None:
            settings = await self.registry.get_settings(chat_id)
            state = "on" if settings.hide_zero_balances else "off"
            return f"Hide zero balances is {state}. Usage: /hidezero on|off"

        await self.registry.set_hide_zero_balances(chat_id, enabled)
        return f"Zero balances {'hidden' if enabled else 'shown'}"

    async def _balance(self, chat_id: str, args: List[str]) -> str:
        if not self.wallet_address:
            return "No wallet configured (set ETH_ADDRESS)"

        eth_price = await self.etherscan.get_eth_price()
        balance = await self.alchemy.get_eth_balance(self.wallet_address)
        if eth_price is None or balance is None:
            return ERROR_TEXT

        return f"Wallet balance:\n{balance:.4f} ETH (${balance * eth_price:,.2f})"

    async def _tokens(self, chat_id: str, args: List[str]) -> str:
        if not self.wallet_address:
            return "No wallet configured (set ETH_ADDRESS)"

        balances = await self.alchemy.get_token_balances(self.wallet_address)
        if balances is None:
            return ERROR_TEXT

        settings = await self.registry.get_settings(chat_id)
        if settings.hide_zero_balances:
            balances = [b for b in balances if not b.is_zero]

        if not balances:
            return "No ERC-20 token balances"

        lines = ["ERC-20 Token balances:"]
        for balance in balances:
            meta = await self.honeypot.get_token_meta(balance.contract_address)
            lines.append("")
            if meta is None:
                lines.append(balance.contract_address)
                lines.append(f"contract: {balance.contract_address}")
                lines.append(f"balance (raw): {balance.raw_balance:,}")
                continue

            amount = balance.raw_balance / 10 ** meta.decimals
            lines.append(f"{meta.name} ({meta.symbol})")
            lines.append(f"contract: {balance.contract_address}")
            lines.append(f"balance: {amount:,.2f}")

        return "\n".join(lines)

    async def _gas(self, chat_id: str, args: List[str]) -> str:
        gwei = await self.alchemy.get_gas_price_gwei()
        eth_price = await self.etherscan.get_eth_price()
        if gwei is None or eth_price is None:
            return ERROR_TEXT

        fees = estimate_swap_fees(gwei, eth_price)
        return (
            f"Current eth gas is: {gwei:.0f} gwei\n\n"
            f"Estimated fees:\n"
            f"Uniswap V2 swap: ${fees['v2']:.2f}\n"
            f"Uniswap V3 swap: ${fees['v3']:.2f}"
        )

    async def _budget(self, chat_id: str, args: List[str]) -> str:
        used = self.budget.used
        capacity = self.budget.capacity
        pct = used / capacity * 100 if capacity else 0.0
        return f"Alchemy compute units: {used:,} / {capacity:,} ({pct:.2f}%)"
