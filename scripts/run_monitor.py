#!/usr/bin/env python3
"""
Token Watch Service - CLI Entry Point
=====================================

Runs the wallet watcher, new-token discovery and the Telegram command bot.

Loops:
    - Wallet watch: alerts on new token transfers of watched wallets
    - Discovery: new Uniswap V2 pairs, classified by honeypot / liquidity
      lock / ownership renouncement checks
    - Budget: daily Alchemy compute-unit bookkeeping

Usage:
    # Start monitor
    python scripts/run_monitor.py

    # Dry run (console alerts only, no Telegram)
    python scripts/run_monitor.py --dry-run

    # Test Telegram configuration
    python scripts/run_monitor.py --test-telegram
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tokenwatch.alerts import send_test_alert
from tokenwatch.config import config
from tokenwatch.service import MonitorService


def setup_logging(log_level: str = config.log_level, log_file: str = config.log_file):
    """Configure logging for the monitor service."""
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = project_root / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Create date-stamped log file (e.g., logs/monitor_2026-01-18.log)
    date_str = datetime.now().strftime("%Y-%m-%d")
    dated_log_file = log_path.parent / f"{log_path.stem}_{date_str}{log_path.suffix}"

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # File handler (date-stamped)
    file_handler = logging.FileHandler(dated_log_file)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from HTTP libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    root_logger.info(f"Logging to: {dated_log_file}")


def main():
    parser = argparse.ArgumentParser(
        description='Token Watch Service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ETHERSCAN_API, ALCHEMY_API, CHAINBASE_API   provider API keys
  TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID        Telegram bot and status chat
  ETH_ADDRESS                                 wallet for /balance and /tokens

Examples:
  python scripts/run_monitor.py                 # Start monitor
  python scripts/run_monitor.py --dry-run       # Console alerts only
  python scripts/run_monitor.py --test-telegram # Test Telegram setup
        """
    )

    parser.add_argument(
        '--watch-interval',
        type=float,
        default=config.watch_interval_sec,
        help=f'Wallet watch interval in seconds (default: {config.watch_interval_sec:g})'
    )

    parser.add_argument(
        '--discovery-interval',
        type=float,
        default=config.discovery_interval_sec,
        help=f'Token discovery interval in seconds (default: {config.discovery_interval_sec:g})'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print alerts to console instead of sending to Telegram'
    )

    parser.add_argument(
        '--no-commands',
        action='store_true',
        help='Do not poll Telegram for chat commands'
    )

    parser.add_argument(
        '--test-telegram',
        action='store_true',
        help='Send a test alert to verify Telegram configuration'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=config.log_level,
        help=f'Log level (default: {config.log_level})'
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Test Telegram mode
    if args.test_telegram:
        print("Testing Telegram configuration...")
        success = send_test_alert(dry_run=args.dry_run)
        if success:
            print("Test alert sent successfully!")
            sys.exit(0)
        else:
            print("Failed to send test alert. Check your TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID.")
            sys.exit(1)

    try:
        config.validate(dry_run=args.dry_run)
    except ValueError as e:
        print(f"\nWARNING: {e}")
        print("Set them in the environment or in a .env file at the project root.")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("TOKEN WATCH SERVICE")
    print("=" * 60)
    print(f"Watch interval:     {args.watch_interval:g} seconds")
    print(f"Discovery interval: {args.discovery_interval:g} seconds")
    commands_on = not args.no_commands and bool(config.telegram_bot_token)
    print(f"Commands:           {'on' if commands_on else 'off'}")
    print(f"Dry run:            {args.dry_run}")
    print(f"Log level:          {args.log_level}")
    print("=" * 60)

    try:
        service = MonitorService(
            watch_interval=args.watch_interval,
            discovery_interval=args.discovery_interval,
            dry_run=args.dry_run,
            enable_commands=not args.no_commands,
        )

        print("\nStarting monitor service...")
        print("Press Ctrl+C to stop\n")

        asyncio.run(service.run())

    except KeyboardInterrupt:
        print("\n\nMonitor stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Monitor service error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
