"""
Monitor Service
===============

Wires the clients, shared state and loops together and runs them on one
event loop:

- wallet watch: new transfers on watched wallets
- discovery: new pairs and their risk classification
- budget: daily compute-budget tick
- commands: Telegram chat commands (optional)
"""

import asyncio
import logging
import signal
from typing import List

from .alerts import TelegramAlerts
from .api import AlchemyClient, ChainbaseClient, EtherscanClient, HoneypotClient
from .bot import CommandBot, TelegramUpdates
from .config import config
from .core import (
    CandidateMonitor,
    ComputeBudget,
    CursorStore,
    PeriodicTask,
    RiskClassifier,
    SubscriberRegistry,
    TokenDiscovery,
    WalletWatcher,
)

logger = logging.getLogger(__name__)


class MonitorService:
    """
    Continuous monitoring service for wallets and new tokens.

    All shared state (subscribers, cursors, budget) is created here and
    passed to the loops that use it.
    """

    def __init__(
        self,
        watch_interval: float = None,
        discovery_interval: float = None,
        dry_run: bool = False,
        enable_commands: bool = True,
    ):
        """
        Initialize the monitor service.

        Args:
            watch_interval: Seconds between wallet watch ticks
            discovery_interval: Seconds between discovery ticks
            dry_run: If True, print messages instead of sending to Telegram
            enable_commands: If False, do not poll Telegram for commands
        """
        self.watch_interval = watch_interval or config.watch_interval_sec
        self.discovery_interval = discovery_interval or config.discovery_interval_sec
        self.dry_run = dry_run
        self.enable_commands = enable_commands

        if enable_commands and not config.telegram_bot_token:
            logger.warning("No TELEGRAM_BOT_TOKEN set, chat commands disabled")
            self.enable_commands = False

        self.alerts = TelegramAlerts.from_config(dry_run=dry_run)

        # Shared state
        self.budget = ComputeBudget()
        self.registry = SubscriberRegistry()
        self.cursors = CursorStore()

        # Upstream clients
        self.etherscan = EtherscanClient()
        self.honeypot = HoneypotClient()
        self.chainbase = ChainbaseClient()
        self.alchemy = AlchemyClient(budget=self.budget)
        self.updates = TelegramUpdates(config.telegram_bot_token or "")

        # Loops
        self.watcher = WalletWatcher(self.etherscan, self.registry, self.alerts, cursors=self.cursors)
        self.candidates = CandidateMonitor(
            TokenDiscovery(self.etherscan, self.honeypot),
            RiskClassifier(self.etherscan, self.honeypot, self.chainbase),
            self.registry,
            self.alerts,
        )
        self.bot = CommandBot(
            self.registry,
            self.alerts,
            self.etherscan,
            self.alchemy,
            self.honeypot,
            self.budget,
            updates=self.updates,
        )

        self.periodic: List[PeriodicTask] = [
            PeriodicTask("wallet-watch", self.watch_interval, self.watcher.tick),
            PeriodicTask("discovery", self.discovery_interval, self.candidates.tick),
            PeriodicTask("budget", config.budget_tick_interval_sec, self.budget.tick,
                         run_immediately=False),
        ]

        self.running = False
        self._tasks: List[asyncio.Task] = []

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_shutdown)

    def _handle_shutdown(self):
        """Handle shutdown signals gracefully."""
        logger.info("Shutdown signal received, stopping monitor...")
        self.stop()

    def _startup_details(self) -> str:
        lines = [
            f"Wallet watch every {self.watch_interval:g}s",
            f"Discovery every {self.discovery_interval:g}s",
            f"Commands: {'on' if self.enable_commands else 'off'}",
        ]
        return "\n".join(lines)

    async def run(self):
        """Main entry point - run all loops until stopped."""
        self.running = True
        self._install_signal_handlers()

        logger.info("=" * 60)
        logger.info("TOKEN WATCH SERVICE STARTING")
        logger.info("=" * 60)
        logger.info(f"Watch interval: {self.watch_interval} seconds")
        logger.info(f"Discovery interval: {self.discovery_interval} seconds")
        logger.info(f"Dry run: {self.dry_run}")

        self._tasks = [asyncio.create_task(task.run(), name=task.name) for task in self.periodic]
        if self.enable_commands:
            self._tasks.append(asyncio.create_task(self.bot.run(), name="commands"))

        await asyncio.to_thread(self.alerts.send_service_status, "started", self._startup_details())

        try:
            results = await asyncio.gather(*self._tasks, return_exceptions=True)
            for task, result in zip(self._tasks, results):
                if isinstance(result, Exception):
                    logger.error(f"Task {task.get_name()} ended with error: {type(result).__name__}: {result}")
        finally:
            await self.close()
            logger.info("TOKEN WATCH SERVICE STOPPED")
            await asyncio.to_thread(self.alerts.send_service_status, "stopped")

    def stop(self):
        """Stop all loops; in-flight notifications are not drained."""
        self.running = False
        for task in self.periodic:
            task.stop()
        self.bot.stop()
        for task in self._tasks:
            task.cancel()

    async def close(self):
        """Close HTTP sessions."""
        for client in (self.etherscan, self.honeypot, self.chainbase, self.alchemy, self.updates):
            await client.close()

