"""Client for the staking server that signs hotspot onboarding payments."""

from __future__ import annotations

from typing import Any, Optional

import requests

from hntwallet.codec import WalletError
from hntwallet.keypair import PublicKey
from hntwallet.transactions import BlockchainTxn

DEFAULT_TIMEOUT = 120
DEFAULT_BASE_URL = "https://onboarding.dewi.org/api/v2"
USER_AGENT = "hntwallet"


def _lookup(document: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(document, dict):
            return None
        document = document.get(key)
    return document


class StakingClient:
    """HTTP client for the onboarding staking server."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> StakingClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, json=body, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as err:
            raise WalletError(f"staking server request failed: {err}") from err

    def address_for(self, gateway: PublicKey) -> PublicKey:
        """The maker key that stakes for the given onboarding key."""
        response = self._request("GET", f"/hotspots/{gateway}")
        address = _lookup(response, "data", "maker", "address")
        if not isinstance(address, str):
            raise WalletError("Invalid staking address from server")
        return PublicKey.from_b58(address)

    def sign(self, onboarding_key: str, txn: BlockchainTxn) -> BlockchainTxn:
        """Have the server sign a transaction with the given onboarding key."""
        response = self._request(
            "POST", f"/transactions/pay/{onboarding_key}", {"transaction": txn.to_b64()}
        )
        txn_data = _lookup(response, "data", "transaction")
        if not isinstance(txn_data, str):
            raise WalletError("Unexpected transaction response from staking server")
        return BlockchainTxn.from_b64(txn_data)