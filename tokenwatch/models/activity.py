"""
Activity Models
===============

Dataclasses for account activity rows returned by Etherscan.
"""

from dataclasses import dataclass


def _to_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ActivityRecord:
    """
    One row of an Etherscan account list (tokentx, txlist or txlistinternal).

    The three lists share most of their columns; fields a list does not
    carry are left empty.
    """
    hash: str
    timestamp: int
    from_address: str
    to_address: str
    contract_address: str = ""
    token_name: str = ""
    token_symbol: str = ""
    value: str = "0"
    function_name: str = ""
    block_number: int = 0
    call_type: str = ""  # internal txs only: "call", "create", "create2"

    @classmethod
    def from_etherscan(cls, row: dict) -> "ActivityRecord":
        """
        Create an ActivityRecord from a raw Etherscan result row.

        Args:
            row: Dict from the "result" list of an account action

        Returns:
            ActivityRecord instance
        """
        return cls(
            hash=row.get("hash", ""),
            timestamp=_to_int(row.get("timeStamp")),
            from_address=(row.get("from") or "").lower(),
            to_address=(row.get("to") or "").lower(),
            contract_address=(row.get("contractAddress") or "").lower(),
            token_name=row.get("tokenName", ""),
            token_symbol=row.get("tokenSymbol", ""),
            value=row.get("value", "0"),
            function_name=row.get("functionName", ""),
            block_number=_to_int(row.get("blockNumber")),
            call_type=row.get("type", ""),
        )

    @property
    def creates_contract(self) -> bool:
        """Whether this row deployed a new contract."""
        return bool(self.contract_address)


@dataclass(frozen=True)
class ContractCreation:
    """Deployer and deployment tx of a contract (getcontractcreation)."""
    contract_address: str
    creator: str
    tx_hash: str

    @classmethod
    def from_etherscan(cls, row: dict) -> "ContractCreation":
        return cls(
            contract_address=(row.get("contractAddress") or "").lower(),
            creator=(row.get("contractCreator") or "").lower(),
            tx_hash=row.get("txHash", ""),
        )
