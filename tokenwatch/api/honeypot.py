"""
Honeypot.is API Client

Single responsibility: token metadata and buy/sell simulation results.
"""

import logging
from typing import Optional

from ..config import config
from ..models import TokenMeta
from .base import AsyncAPIClient

logger = logging.getLogger(__name__)

# Used when honeypot.is could not run its simulation: do not trade it
SIMULATION_FAILED_TAX = 100.0
MISSING_RESULT_REASON = (
    "Warning! honeypot could not be determined as honeypot.is api did not send field"
)


def parse_token_meta(data: dict) -> Optional[TokenMeta]:
    """
    Build a TokenMeta from an IsHoneypot response.

    Missing simulation results mean the simulation failed, so taxes are set
    to 100%. A missing honeypot result is treated as a honeypot.

    Args:
        data: Decoded IsHoneypot JSON

    Returns:
        TokenMeta or None if the response lacks token/pair data
    """
    token = data.get("token") or {}
    pair = data.get("pair") or {}
    pair_info = pair.get("pair") or {}
    with_token = data.get("withToken") or {}

    if not token.get("address"):
        logger.warning(f"honeypot.is response without token data: {data.get('simulationError')}")
        return None

    simulation = data.get("simulationResult")
    if simulation:
        buy_tax = float(simulation.get("buyTax", SIMULATION_FAILED_TAX))
        sell_tax = float(simulation.get("sellTax", SIMULATION_FAILED_TAX))
    else:
        buy_tax = sell_tax = SIMULATION_FAILED_TAX

    honeypot_result = data.get("honeypotResult")
    if honeypot_result is not None:
        is_honeypot = bool(honeypot_result.get("isHoneypot"))
        reason = honeypot_result.get("honeypotReason") if is_honeypot else None
    else:
        is_honeypot = True
        reason = MISSING_RESULT_REASON

    contract_code = data.get("contractCode")
    flags = (data.get("summary") or {}).get("flags")
    # Low-risk tokens arrive with an empty flags list
    descriptions = [f.get("description", "") for f in flags] if flags else None

    return TokenMeta(
        contract_address=token["address"].lower(),
        name=token.get("name", ""),
        symbol=token.get("symbol", ""),
        decimals=int(token.get("decimals") or 0),
        pair_address=(data.get("pairAddress") or pair_info.get("address") or "").lower(),
        pair_type=pair_info.get("type", ""),
        pair_symbol=with_token.get("symbol", ""),
        is_honeypot=is_honeypot,
        honeypot_reason=reason,
        buy_tax=buy_tax,
        sell_tax=sell_tax,
        liquidity_usd=float(pair.get("liquidity") or 0.0),
        is_open_source=contract_code.get("openSource") if contract_code else None,
        has_proxy_calls=contract_code.get("hasProxyCalls") if contract_code else None,
        flags_description=descriptions,
    )


class HoneypotClient(AsyncAPIClient):
    """Async client for the honeypot.is IsHoneypot endpoint."""

    name = "honeypot"

    def __init__(self, url: str = None, **kwargs):
        super().__init__(**kwargs)
        self.url = url or config.honeypot_url

    async def get_token_meta(self, address: str) -> Optional[TokenMeta]:
        """
        Look up a token (or a pair, which resolves to its token).

        Args:
            address: Token contract or pair address

        Returns:
            TokenMeta or None on failure
        """
        data = await self._request("GET", self.url, params={"address": address})
        if not isinstance(data, dict):
            return None

        try:
            return parse_token_meta(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not parse honeypot.is response for {address}: {e}")
            return None
