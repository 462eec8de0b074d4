import asyncio

import pytest

from tokenwatch.api import TokenBalance
from tokenwatch.bot import CommandBot, estimate_swap_fees, parse_command
from tokenwatch.bot.commands import INVALID_WALLETS_TEXT, UNKNOWN_COMMAND_TEXT
from tokenwatch.core import ComputeBudget, SubscriberRegistry

from fakes import FakeAlchemy, FakeEtherscan, FakeHoneypot, FakeNotifier, token_meta

WALLET = "0x" + "e" * 40
ADDR_1 = "0x" + "1" * 40
ADDR_2 = "0x" + "2" * 40
TOKEN = "0x" + "a" * 40
UNKNOWN_TOKEN = "0x" + "b" * 40


def make_bot(alchemy=None, metas=None, wallet=WALLET):
    registry = SubscriberRegistry()
    notifier = FakeNotifier()
    budget = ComputeBudget(capacity=1000)
    bot = CommandBot(
        registry,
        notifier,
        FakeEtherscan(),
        alchemy or FakeAlchemy(),
        FakeHoneypot(metas),
        budget,
        wallet_address=wallet,
    )
    return bot, registry, notifier, budget


def run(bot, text, chat_id="42"):
    return asyncio.run(bot.handle_command(chat_id, text))


@pytest.mark.parametrize("text, expected", [
    ("/help", ("/help", [])),
    ("/Watch@TokenWatchBot 0x1 0x2", ("/watch", ["0x1", "0x2"])),
    ("  /snipe on ", ("/snipe", ["on"])),
    ("hello", (None, [])),
    ("", (None, [])),
])
def test_parse_command(text, expected):
    assert parse_command(text) == expected


def test_unknown_input_points_to_help():
    bot, _, _, _ = make_bot()
    assert run(bot, "hello") == UNKNOWN_COMMAND_TEXT
    assert run(bot, "/buy 0xabc") == UNKNOWN_COMMAND_TEXT


def test_help_lists_commands():
    bot, _, _, _ = make_bot()
    reply = run(bot, "/help")
    for command in ("/watch", "/snipe", "/balance", "/tokens", "/gas"):
        assert command in reply


def test_watch_sets_list_and_replies_numbered():
    async def scenario():
        bot, registry, _, _ = make_bot()
        reply = await bot.handle_command("42", f"/watch {ADDR_1} junk {ADDR_2}")
        return reply, await registry.get_watch_list("42")

    reply, watched = asyncio.run(scenario())

    assert watched == [ADDR_1, ADDR_2]
    assert f"1. {ADDR_1}" in reply
    assert f"2. {ADDR_2}" in reply


def test_watch_with_no_valid_address_cancels():
    bot, _, _, _ = make_bot()
    assert run(bot, "/watch 0x123 nope") == INVALID_WALLETS_TEXT
    assert run(bot, "/watch") == INVALID_WALLETS_TEXT


def test_snipe_toggle():
    async def scenario():
        bot, registry, _, _ = make_bot()
        on = await bot.handle_command("42", "/snipe on")
        subscribers = await registry.auto_snipe_subscribers()
        usage = await bot.handle_command("42", "/snipe maybe")
        off = await bot.handle_command("42", "/snipe OFF")
        return on, subscribers, usage, off, await registry.auto_snipe_subscribers()

    on, subscribers, usage, off, after = asyncio.run(scenario())

    assert on == "Auto-snipe enabled"
    assert subscribers == ["42"]
    assert "Auto-snipe is on" in usage
    assert off == "Auto-snipe disabled"
    assert after == []


def test_balance():
    bot, _, _, _ = make_bot(alchemy=FakeAlchemy(eth_balance=1.5))
    assert run(bot, "/balance") == "Wallet balance:\n1.5000 ETH ($3,000.00)"


def test_balance_without_wallet():
    bot, _, _, _ = make_bot(wallet="")
    assert "ETH_ADDRESS" in run(bot, "/balance")


def test_gas_estimates():
    bot, _, _, _ = make_bot(alchemy=FakeAlchemy(gas_gwei=20.0))
    fees = estimate_swap_fees(20.0, 2000.0)

    reply = run(bot, "/gas")

    assert fees["v2"] == pytest.approx(20e-9 * 2000 * 152809 * 1.03)
    assert fees["v3"] == pytest.approx(20e-9 * 2000 * 184523 * 1.03)
    assert "Current eth gas is: 20 gwei" in reply
    assert f"Uniswap V2 swap: ${fees['v2']:.2f}" in reply


def test_gas_upstream_failure():
    bot, _, _, _ = make_bot(alchemy=FakeAlchemy(gas_gwei=None))
    assert "went wrong" in run(bot, "/gas")


def test_tokens_respects_hide_zero():
    balances = [
        TokenBalance(contract_address=TOKEN, raw_balance=1_500_000),
        TokenBalance(contract_address=UNKNOWN_TOKEN, raw_balance=0),
    ]
    bot, _, _, _ = make_bot(
        alchemy=FakeAlchemy(token_balances=balances),
        metas={TOKEN: token_meta(TOKEN, name="Alpha", symbol="ALP", decimals=6)},
    )

    async def scenario():
        shown = await bot.handle_command("42", "/tokens")
        await bot.handle_command("42", "/hidezero on")
        hidden = await bot.handle_command("42", "/tokens")
        return shown, hidden

    shown, hidden = asyncio.run(scenario())

    assert "Alpha (ALP)" in shown
    assert "balance: 1.50" in shown
    assert UNKNOWN_TOKEN in shown
    assert UNKNOWN_TOKEN not in hidden
    assert "Alpha (ALP)" in hidden


def test_budget_report():
    bot, _, _, budget = make_bot()
    budget.add_units(250)
    assert run(bot, "/budget") == "Alchemy compute units: 250 / 1,000 (25.00%)"


def test_process_update_replies_to_chat():
    bot, _, notifier, _ = make_bot()
    update = {"update_id": 7, "message": {"chat": {"id": 42}, "text": "/help"}}

    reply = asyncio.run(bot.process_update(update))

    assert bot.offset == 8
    assert notifier.texts == [("42", reply)]


def test_process_update_ignores_non_text():
    bot, _, notifier, _ = make_bot()
    assert asyncio.run(bot.process_update({"update_id": 3, "message": {"chat": {"id": 1}}})) is None
    assert bot.offset == 4
    assert notifier.texts == []


def test_command_error_is_reported_to_chat():
    class BrokenAlchemy(FakeAlchemy):
        async def get_gas_price_gwei(self):
            raise RuntimeError("boom")

    bot, _, notifier, _ = make_bot(alchemy=BrokenAlchemy())
    update = {"update_id": 1, "message": {"chat": {"id": 42}, "text": "/gas"}}

    reply = asyncio.run(bot.process_update(update))

    assert "went wrong" in reply
    assert notifier.texts == [("42", reply)]
