"""Fake upstream collaborators for tests."""

from collections import defaultdict, deque

from tokenwatch.models import ActivityRecord, ContractCreation, TokenMeta


def transfer(ts, hash_=None, contract="0xtoken", symbol="TKN", name="Token",
             from_address="0xfrom", to_address="0xto"):
    return ActivityRecord(
        hash=hash_ or f"0xhash{ts}",
        timestamp=ts,
        from_address=from_address,
        to_address=to_address,
        contract_address=contract,
        token_name=name,
        token_symbol=symbol,
    )


def pair_creation(ts, pair):
    return ActivityRecord(
        hash=f"0xcreate{ts}",
        timestamp=ts,
        from_address="0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f",
        to_address="",
        contract_address=pair,
        call_type="create2",
    )


def token_meta(contract, honeypot=False, buy_tax=0.0, sell_tax=0.0, name="Token", symbol="TKN", decimals=18):
    return TokenMeta(
        contract_address=contract,
        name=name,
        symbol=symbol,
        decimals=decimals,
        pair_address="",
        pair_type="UniswapV2",
        pair_symbol="WETH",
        is_honeypot=honeypot,
        honeypot_reason=None,
        buy_tax=buy_tax,
        sell_tax=sell_tax,
        liquidity_usd=10_000.0,
    )


class FakeEtherscan:
    """
    Scripted Etherscan client.

    Per-address responses are queued; the last queued response repeats once
    the queue is down to one entry. None in a queue means a failed fetch.
    """

    def __init__(self):
        self.transfers = defaultdict(deque)
        self.internal = deque()
        self.normal = {}
        self.creations = {}
        self.failed_creation_batches = set()
        self.eth_price = 2000.0
        self.calls = []

    @staticmethod
    def _next(queue):
        if not queue:
            return []
        if len(queue) == 1:
            return queue[0]
        return queue.popleft()

    async def get_token_transfers(self, address, page_size=None):
        self.calls.append(("tokentx", address))
        return self._next(self.transfers[address])

    async def get_internal_transactions(self, address, count=None):
        self.calls.append(("txlistinternal", address))
        return self._next(self.internal)

    async def get_transactions(self, address, page_size=None):
        self.calls.append(("txlist", address))
        return self.normal.get(address, [])

    async def get_contract_creation(self, addresses):
        self.calls.append(("getcontractcreation", tuple(addresses)))
        assert len(addresses) <= 5
        if any(a in self.failed_creation_batches for a in addresses):
            return None
        return [
            ContractCreation(contract_address=a, creator=self.creations[a][0], tx_hash=self.creations[a][1])
            for a in addresses
            if a in self.creations
        ]

    async def get_eth_price(self):
        return self.eth_price


class FakeHoneypot:
    def __init__(self, metas=None):
        self.metas = metas or {}
        self.lookups = []

    async def get_token_meta(self, address):
        self.lookups.append(address)
        return self.metas.get(address)


class FakeChainbase:
    def __init__(self, holders=None):
        self.holders = holders or {}
        self.lookups = []

    async def get_top_holders(self, contract, limit=None):
        self.lookups.append(contract)
        return self.holders.get(contract)


class FakeAlchemy:
    def __init__(self, gas_gwei=20.0, eth_balance=1.5, token_balances=None):
        self.gas_gwei = gas_gwei
        self.eth_balance = eth_balance
        self.token_balances = token_balances if token_balances is not None else []

    async def get_gas_price_gwei(self):
        return self.gas_gwei

    async def get_eth_balance(self, address):
        return self.eth_balance

    async def get_token_balances(self, address):
        return self.token_balances


class FakeNotifier:
    """Records notifications instead of sending them."""

    def __init__(self, fail=False, undelivered=False):
        self.fail = fail
        self.undelivered = undelivered
        self.wallet_events = []
        self.buy_events = []
        self.texts = []

    def notify_wallet_activity(self, subscriber, address, record):
        if self.fail:
            raise RuntimeError("telegram down")
        self.wallet_events.append((subscriber, address, record))
        return None if self.undelivered else 1

    def notify_candidate_to_buy(self, subscriber, candidate):
        if self.fail:
            raise RuntimeError("telegram down")
        self.buy_events.append((subscriber, candidate))
        return None if self.undelivered else 1

    def send_text(self, chat_id, text):
        self.texts.append((chat_id, text))
        return 1
