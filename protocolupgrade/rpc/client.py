# MIT License
# Copyright (c) 2025 Hashborn

"""
Minimal Ethereum JSON-RPC client.

Only the calls the upgrade tool needs. Every failure surfaces as RpcError;
nothing is retried.
"""

import itertools
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ..protocol.config.params import RECEIPT_POLL_INTERVAL_SEC, RECEIPT_TIMEOUT_SEC, RPC_TIMEOUT_SEC
from ..protocol.types.common import RpcError, TransactionFailedError

logger = logging.getLogger(__name__)


def hex_to_int(value: str) -> int:
    return int(value, 16)


class JsonRpcClient:
    def __init__(self, url: str, timeout: float = RPC_TIMEOUT_SEC, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []}
        logger.debug(f"RPC {method} {params}")
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.RequestException as e:
            raise RpcError(f"{method} request to {self.url} failed: {e}")
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON: {e}")

        if data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"{method} failed: {message}")
        return data.get("result")

    def chain_id(self) -> int:
        return hex_to_int(self.call("eth_chainId"))

    def gas_price(self) -> int:
        return hex_to_int(self.call("eth_gasPrice"))

    def get_transaction_count(self, address: str, block: str = "latest") -> int:
        return hex_to_int(self.call("eth_getTransactionCount", [address, block]))

    def eth_call(self, to: str, data: str, block: str = "latest") -> str:
        return self.call("eth_call", [{"to": to, "data": data}, block])

    def send_raw_transaction(self, raw_tx: str) -> str:
        return self.call("eth_sendRawTransaction", [raw_tx])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return self.call("eth_getTransactionReceipt", [tx_hash])

    def wait_for_receipt(self, tx_hash: str, timeout: float = RECEIPT_TIMEOUT_SEC,
                         poll_interval: float = RECEIPT_POLL_INTERVAL_SEC) -> Dict[str, Any]:
        """
        Block until the transaction is included.

        Raises:
            TransactionFailedError: reverted, or not included within timeout
        """
        deadline = time.monotonic() + timeout
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                if hex_to_int(receipt.get("status", "0x1")) == 0:
                    raise TransactionFailedError(f"Transaction {tx_hash} reverted")
                return receipt
            if time.monotonic() >= deadline:
                raise TransactionFailedError(f"Transaction {tx_hash} not included after {timeout}s")
            time.sleep(poll_interval)
