"""
Cardano SL explorer HTTP backend.
Answers address-usage queries for discovery and relays signed transactions.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from adawallet.backends.base import BlockchainExplorer, ExplorerError

if TYPE_CHECKING:
    from adawallet.config import Settings
    from adawallet.transaction import SignedTransaction

DEFAULT_EXPLORER_URL = "https://explorer.cardano.org"

# Timeout for explorer requests (seconds)
DEFAULT_REQUEST_TIMEOUT = 30.0

# Addresses per bulk summary request
DEFAULT_ADDRESS_CHUNK_SIZE = 50


def _chunks(items: list[str], size: int) -> Iterable[list[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


class HttpBlockchainExplorer(BlockchainExplorer):
    """
    Blockchain explorer client for the Cardano SL explorer API.

    Responses use the Haskell Either convention: {"Right": result} on
    success, {"Left": message} on failure.
    """

    def __init__(
        self,
        explorer_url: str = DEFAULT_EXPLORER_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        address_chunk_size: int = DEFAULT_ADDRESS_CHUNK_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if address_chunk_size < 1:
            raise ValueError(f"Invalid address chunk size: {address_chunk_size}")

        self.explorer_url = explorer_url.rstrip("/")
        self.address_chunk_size = address_chunk_size
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _post(self, endpoint: str, payload: Any) -> Any:
        """
        POST to the explorer and unwrap the Either envelope.

        Raises:
            ExplorerError: If the explorer answers with "Left"
            httpx.HTTPError: On connection/timeout/status errors
        """
        url = f"{self.explorer_url}{endpoint}"

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Explorer request timed out: {endpoint} - {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Explorer request failed: {endpoint} - {e}")
            raise

        if not isinstance(data, dict):
            raise ExplorerError(f"Unexpected explorer response from {endpoint}: {data!r}")
        if "Left" in data:
            raise ExplorerError(f"Explorer error from {endpoint}: {data['Left']}")
        if "Right" not in data:
            raise ExplorerError(f"Unexpected explorer response from {endpoint}: {data!r}")

        return data["Right"]

    async def get_addresses_summary(self, addresses: list[str]) -> dict[str, Any]:
        """Bulk summary (caTxNum, caTxList, ...) for up to one chunk of addresses"""
        return await self._post("/api/bulk/addresses/summary", addresses)

    async def is_some_address_used(self, addresses: Iterable[str]) -> bool:
        addresses = list(addresses)

        for chunk in _chunks(addresses, self.address_chunk_size):
            summary = await self.get_addresses_summary(chunk)
            if summary.get("caTxNum", 0) > 0:
                return True

        return False

    async def filter_used_addresses(self, addresses: Iterable[str]) -> set[str]:
        addresses = list(addresses)
        used: set[str] = set()

        for chunk in _chunks(addresses, self.address_chunk_size):
            wanted = set(chunk)
            summary = await self.get_addresses_summary(chunk)

            for tx in summary.get("caTxList", []):
                for address, _amount in tx.get("ctbInputs", []) + tx.get("ctbOutputs", []):
                    if address in wanted:
                        used.add(address)

        logger.debug(f"{len(used)} of {len(addresses)} addresses have history")
        return used

    async def submit_transaction(self, signed: SignedTransaction) -> str:
        txid = signed.get_id()
        signed_tx = base64.b64encode(bytes.fromhex(signed.to_hex())).decode("ascii")

        try:
            await self._post("/api/v2/txs/signed", {"signedTx": signed_tx})
        except (ExplorerError, httpx.HTTPError) as e:
            logger.error(f"Failed to submit transaction {txid}: {e}")
            raise

        logger.info(f"Submitted transaction: {txid}")
        return txid

    async def close(self) -> None:
        await self.client.aclose()


def create_explorer(settings: Settings) -> HttpBlockchainExplorer:
    """Explorer client configured from settings (ADAWALLET_EXPLORER_URL, ...)"""
    return HttpBlockchainExplorer(
        explorer_url=settings.explorer_url, timeout=settings.explorer_timeout
    )
