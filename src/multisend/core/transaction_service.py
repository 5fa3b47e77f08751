"""Safe Transaction Service client."""

from typing import Any, Dict, Optional

import requests
from loguru import logger
from requests.exceptions import RequestException

from multisend.core.errors import TransactionServiceError
from multisend.core.http import create_session
from multisend.core.models import SafeTransactionParams
from multisend.core.settings import settings

# Network value -> transaction service host name
SERVICE_NAMES: Dict[str, str] = {
    "ethereum": "mainnet",
    "goerli": "goerli",
    "sepolia": "sepolia",
    "polygon": "polygon",
    "bsc": "bsc",
    "arbitrum": "arbitrum",
    "optimism": "optimism",
    "avalanche": "avalanche",
    "gnosis": "gnosis-chain",
    "base": "base",
    "base-goerli": "base-testnet",
    "zksync": "zksync",
}


def get_service_url(network: str) -> str:
    """Base URL of the transaction service for a network.

    Raises:
        TransactionServiceError: If the network has no hosted service.

    """
    name = SERVICE_NAMES.get(network.lower())
    if name is None:
        raise TransactionServiceError(f"No Safe Transaction Service for network: {network}")
    return f"https://safe-transaction-{name}.safe.global"


class SafeTransactionServiceClient:
    """Fetch queued or executed multisig transactions from the Safe Transaction Service."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        """Initialize the HTTP session, authenticated when an API key is configured."""
        headers = {}
        if settings.safe_api_key is not None:
            headers["Authorization"] = f"Bearer {settings.safe_api_key.get_secret_value()}"
        self.session = session or create_session(headers)
        self.timeout = timeout if timeout is not None else settings.lookup_timeout

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except RequestException as exc:
            raise TransactionServiceError(f"HTTP error querying {url}: {exc}") from exc
        except ValueError as exc:
            raise TransactionServiceError(f"Invalid JSON from {url}: {exc}") from exc

    def fetch_safe_version(self, network: str, safe_address: str) -> str:
        """On-chain version of a Safe, or the configured default when the service omits it."""
        url = f"{get_service_url(network)}/api/v1/safes/{safe_address}/"
        body = self._get(url)
        version = body.get("version") if isinstance(body, dict) else None
        if not version:
            logger.warning(
                f"No version reported for Safe {safe_address}, "
                f"using {settings.default_safe_version}"
            )
            return settings.default_safe_version
        return str(version)

    def fetch_transaction(self, network: str, safe_address: str, nonce: int) -> SafeTransactionParams:
        """Fetch the multisig transaction of a Safe at the given nonce.

        Raises:
            TransactionServiceError: On HTTP errors or when no transaction exists for the nonce.

        """
        url = f"{get_service_url(network)}/api/v1/safes/{safe_address}/multisig-transactions/"
        body = self._get(url, params={"nonce": nonce})

        results = body.get("results") if isinstance(body, dict) else None
        if not results:
            raise TransactionServiceError(f"No transaction found with nonce {nonce}")
        tx = results[0]

        confirmations = tx.get("confirmations") or []
        signatures = "0x" + "".join(
            (c.get("signature") or "").removeprefix("0x") for c in confirmations
        )

        version = self.fetch_safe_version(network, safe_address)
        logger.info(f"Fetched transaction {tx.get('safeTxHash')} for Safe {safe_address}")

        return SafeTransactionParams(
            to=tx["to"],
            value=tx.get("value"),
            data=tx.get("data") or "0x",
            operation=tx.get("operation") or 0,
            safe_tx_gas=tx.get("safeTxGas"),
            base_gas=tx.get("baseGas"),
            gas_price=tx.get("gasPrice"),
            gas_token=tx.get("gasToken"),
            refund_receiver=tx.get("refundReceiver"),
            nonce=tx.get("nonce", nonce),
            version=version,
            data_decoded=tx.get("dataDecoded"),
            signatures=signatures,
        )
