import asyncio

from tokenwatch.core import CandidateMonitor, RiskClassifier, SubscriberRegistry, TokenDiscovery
from tokenwatch.models import ActivityRecord, CandidateToken, CheckOutcome

from fakes import FakeChainbase, FakeEtherscan, FakeHoneypot, FakeNotifier, pair_creation, token_meta

PAIR_SEED = "0x" + "0" * 39 + "1"
PAIR = "0x" + "1" * 40
TOKEN = "0x" + "a" * 40
CREATOR = "0x" + "c" * 40
DEAD = "0x000000000000000000000000000000000000dead"


class Clock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def build(holders=None, normal=None, metas=None):
    etherscan = FakeEtherscan()
    etherscan.normal = normal or {}
    etherscan.creations = {TOKEN: (CREATOR, "0xcreationtx")}
    etherscan.internal.extend([
        [pair_creation(-10, PAIR_SEED)],
        [pair_creation(0, PAIR), pair_creation(-10, PAIR_SEED)],
    ])
    honeypot = FakeHoneypot(metas if metas is not None else {PAIR: token_meta(TOKEN), TOKEN: token_meta(TOKEN)})
    chainbase = FakeChainbase(holders)
    registry = SubscriberRegistry()
    notifier = FakeNotifier()
    clock = Clock()
    monitor = CandidateMonitor(
        TokenDiscovery(etherscan, honeypot),
        RiskClassifier(etherscan, honeypot, chainbase, max_tax=5.0),
        registry,
        notifier,
        clock=clock,
        ttl=7200,
    )
    return monitor, registry, notifier, clock, etherscan


def renounce_tx():
    return ActivityRecord(hash="0xr", timestamp=5, from_address=CREATOR, to_address=TOKEN,
                          function_name="renounceOwnership()")


def test_unrenounced_candidate_expires_after_two_hours():
    monitor, _, notifier, clock, _ = build()

    async def scenario():
        await monitor.tick()  # baseline
        clock.now = 60
        await monitor.tick()  # candidate discovered at t=0
        pending = len(monitor.candidates)
        renounced = monitor.candidates[0].renounced
        clock.now = 7200
        await monitor.tick()
        at_ttl = len(monitor.candidates)
        clock.now = 7201
        await monitor.tick()
        return pending, renounced, at_ttl, len(monitor.candidates)

    pending, renounced, at_ttl, after = asyncio.run(scenario())

    assert pending == 1
    assert renounced is CheckOutcome.FALSE
    assert at_ttl == 1
    assert after == 0
    assert monitor.stats["expired"] == 1
    assert notifier.buy_events == []


def test_buy_candidate_notifies_auto_snipe_subscribers_once():
    monitor, registry, notifier, clock, _ = build(
        holders={TOKEN: [DEAD]},
        normal={CREATOR: [renounce_tx()]},
    )

    async def scenario():
        await registry.set_auto_snipe("sniper", True)
        await registry.set_auto_snipe("watcher", False)
        await monitor.tick()
        clock.now = 60
        bought = await monitor.tick()
        again = await monitor.tick()
        return bought, again

    bought, again = asyncio.run(scenario())

    assert len(bought) == 1
    assert bought[0].to_buy is True
    assert again == []
    assert [s for s, _ in notifier.buy_events] == ["sniper"]
    assert monitor.stats["notified"] == 1
    assert monitor.candidates == []


def test_buy_candidate_without_subscribers_is_dropped_silently():
    monitor, _, notifier, clock, _ = build(
        holders={TOKEN: [DEAD]},
        normal={CREATOR: [renounce_tx()]},
    )

    async def scenario():
        await monitor.tick()
        clock.now = 60
        return await monitor.tick()

    bought = asyncio.run(scenario())

    assert len(bought) == 1
    assert notifier.buy_events == []
    assert monitor.candidates == []


def test_renounced_honeypot_is_rejected():
    monitor, registry, notifier, clock, _ = build(
        holders={TOKEN: [DEAD]},
        normal={CREATOR: [renounce_tx()]},
        metas={PAIR: token_meta(TOKEN), TOKEN: token_meta(TOKEN, sell_tax=30.0)},
    )

    async def scenario():
        await registry.set_auto_snipe("sniper", True)
        await monitor.tick()
        clock.now = 60
        await monitor.tick()

    asyncio.run(scenario())

    assert monitor.candidates == []
    assert monitor.stats["rejected"] == 1
    assert notifier.buy_events == []


def test_add_skips_already_monitored_pairs():
    monitor, _, _, _, _ = build()
    token = CandidateToken(pair_address=PAIR, contract_address=TOKEN, creator=CREATOR,
                           creation_tx_hash="0x1", created_at=0)
    duplicate = CandidateToken(pair_address=PAIR, contract_address=TOKEN, creator=CREATOR,
                               creation_tx_hash="0x1", created_at=0)

    assert monitor.add([token, duplicate]) == 1
    assert monitor.add([duplicate]) == 0
    assert len(monitor.candidates) == 1


def test_renounced_but_unlocked_candidate_expires_after_two_hours():
    monitor, registry, notifier, clock, _ = build(
        holders={TOKEN: ["0x" + "9" * 40]},
        normal={CREATOR: [renounce_tx()]},
    )

    async def scenario():
        await registry.set_auto_snipe("sniper", True)
        await monitor.tick()
        clock.now = 60
        await monitor.tick()
        renounced = monitor.candidates[0].renounced
        clock.now = 7200
        await monitor.tick()
        at_ttl = len(monitor.candidates)
        clock.now = 7201
        await monitor.tick()
        return renounced, at_ttl, len(monitor.candidates)

    renounced, at_ttl, after = asyncio.run(scenario())

    assert renounced is CheckOutcome.TRUE
    assert at_ttl == 1
    assert after == 0
    assert monitor.stats["expired"] == 1
    assert notifier.buy_events == []


def test_undelivered_buy_alert_is_not_counted():
    monitor, registry, _, clock, _ = build(
        holders={TOKEN: [DEAD]},
        normal={CREATOR: [renounce_tx()]},
    )
    monitor.notifier = FakeNotifier(undelivered=True)

    async def scenario():
        await registry.set_auto_snipe("sniper", True)
        await monitor.tick()
        clock.now = 60
        return await monitor.tick()

    bought = asyncio.run(scenario())

    assert len(bought) == 1
    assert monitor.stats["notified"] == 0
    assert len(monitor.notifier.buy_events) == 1
