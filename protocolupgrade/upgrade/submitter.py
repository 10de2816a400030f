# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade transaction submission.

Reads the bundle written by `build-default`, picks the calldata for one
operation and sends it as a signed transaction, waiting for inclusion.

The legacy diamond proxy path (no governance address) is kept for library
callers only; the CLI rejects legacy mode before reaching it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex

from ..protocol.abi import Governance, LegacyDiamondProxy
from ..protocol.config.params import DEFAULT_GAS_LIMIT, RECEIPT_TIMEOUT_SEC
from ..protocol.types.bundle import TransactionBundle
from ..protocol.types.common import (
    ZERO_HASH, MalformedArtifactError, ProtocolError, SubmitOperation, UnsupportedFeatureError,
)
from ..protocol.types.fields import hex_to_bytes
from ..rpc.client import JsonRpcClient
from .persister import read_bundle

logger = logging.getLogger(__name__)

# operation -> (governance bundle key, legacy diamond proxy bundle key)
OPERATION_KEYS: Dict[SubmitOperation, Tuple[str, Optional[str]]] = {
    SubmitOperation.PROPOSE_UPGRADE_STM: ("stmScheduleTransparentOperation", None),
    SubmitOperation.EXECUTE_UPGRADE_STM: ("stmExecuteOperation", None),
    SubmitOperation.PROPOSE_UPGRADE: ("scheduleTransparentOperation", "proposeTransparentUpgradeCalldata"),
    SubmitOperation.EXECUTE_UPGRADE: ("executeOperation", "executeUpgradeCalldata"),
    SubmitOperation.PROPOSE_UPGRADE_DIRECT: ("stmScheduleOperationDirect", None),
    SubmitOperation.EXECUTE_UPGRADE_DIRECT: ("stmExecuteOperationDirect", None),
}

OPERATION_LABELS: Dict[SubmitOperation, str] = {
    SubmitOperation.PROPOSE_UPGRADE_STM: "Proposing upgrade for protocolVersion {} in STM",
    SubmitOperation.EXECUTE_UPGRADE_STM: "Execute upgrade for protocolVersion {} in STM",
    SubmitOperation.PROPOSE_UPGRADE: "Proposing upgrade for protocolVersion {}",
    SubmitOperation.EXECUTE_UPGRADE: "Execute upgrade for protocolVersion {}",
    SubmitOperation.PROPOSE_UPGRADE_DIRECT: "Proposing direct upgrade for protocolVersion {} in STM",
    SubmitOperation.EXECUTE_UPGRADE_DIRECT: "Execute direct upgrade for protocolVersion {} in STM",
}


@dataclass
class CancelResult:
    operation_id: str
    calldata: str
    to: str
    receipt: Optional[Dict[str, Any]] = None


def select_transaction(bundle: TransactionBundle, operation: SubmitOperation,
                       new_governance: Optional[str], zksync_address: Optional[str] = None) -> Tuple[str, str]:
    """
    Resolve (target, calldata) for an operation.

    With a governance address every operation targets the governance
    contract. Without one only propose/execute have a diamond proxy variant.
    """
    registry_key, legacy_key = OPERATION_KEYS[operation]
    if new_governance:
        to, key = new_governance, registry_key
    else:
        if legacy_key is None:
            raise UnsupportedFeatureError(f"{operation.value} requires a governance address")
        if not zksync_address:
            raise ProtocolError("Diamond proxy address is required without a governance address")
        to, key = zksync_address, legacy_key

    calldata = bundle.calldata(key)
    if calldata is None:
        raise MalformedArtifactError(
            f"Transaction bundle has no {key}, rebuild it for the requested governance mode"
        )
    return to_checksum_address(to), calldata


def fetch_next_proposal_id(client: JsonRpcClient, diamond_proxy: str) -> int:
    """Next free proposal id of a legacy diamond proxy."""
    fn = LegacyDiamondProxy.GET_CURRENT_PROPOSAL_ID
    (current,) = fn.decode_output(client.eth_call(to_checksum_address(diamond_proxy), fn.encode()))
    proposal_id = current + 1
    logger.info(f"New proposal id: {proposal_id} for {diamond_proxy}")
    return proposal_id


class UpgradeSubmitter:
    """
    Sends bundle calldata from one wallet.

    `wallet` may be None for read-only use (dry-run cancel).
    """

    def __init__(self, client: JsonRpcClient, wallet: Optional[LocalAccount] = None,
                 gas_limit: int = DEFAULT_GAS_LIMIT, receipt_timeout: float = RECEIPT_TIMEOUT_SEC):
        self.client = client
        self.wallet = wallet
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout

    def send_transaction(self, to: str, calldata: str, gas_price: Optional[int] = None,
                         nonce: Optional[int] = None) -> Dict[str, Any]:
        """
        Sign and send one transaction, then wait for its receipt.

        Gas price and nonce are fetched from the node when not given.
        """
        if self.wallet is None:
            raise ProtocolError("A wallet is required to send transactions")

        if gas_price is None:
            gas_price = self.client.gas_price()
        if nonce is None:
            nonce = self.client.get_transaction_count(self.wallet.address)

        tx = {
            "to": to_checksum_address(to),
            "data": calldata,
            "value": 0,
            "gas": self.gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": self.client.chain_id(),
        }
        signed = self.wallet.sign_transaction(tx)
        tx_hash = self.client.send_raw_transaction(to_hex(signed.raw_transaction))
        logger.info(f"Transaction hash: {tx_hash}")

        receipt = self.client.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)
        logger.info("Transaction is executed")
        return receipt

    def submit(self, bundle_path: str, operation: SubmitOperation, new_governance: Optional[str],
               zksync_address: Optional[str] = None, gas_price: Optional[int] = None,
               nonce: Optional[int] = None) -> Dict[str, Any]:
        bundle = read_bundle(bundle_path)
        to, calldata = select_transaction(bundle, operation, new_governance, zksync_address)
        logger.info(OPERATION_LABELS[operation].format(bundle.protocol_version))
        return self.send_transaction(to, calldata, gas_price=gas_price, nonce=nonce)

    def cancel_upgrade(self, bundle_path: str, new_governance: Optional[str],
                       zksync_address: Optional[str] = None, execute: bool = False,
                       gas_price: Optional[int] = None, nonce: Optional[int] = None) -> CancelResult:
        """
        Cancel a scheduled upgrade.

        The operation id comes from the contract itself (eth_call). With
        `execute` False the cancel calldata is only returned, nothing is sent.
        """
        bundle = read_bundle(bundle_path)

        if new_governance:
            if bundle.governance_operation is None:
                raise MalformedArtifactError("Transaction bundle has no governanceOperation")
            to = to_checksum_address(new_governance)
            hash_call = Governance.HASH_OPERATION.encode(bundle.governance_operation.abi_tuple())
            (operation_id,) = Governance.HASH_OPERATION.decode_output(self.client.eth_call(to, hash_call))
            calldata = Governance.CANCEL.encode(operation_id)
        else:
            if not zksync_address:
                raise ProtocolError("Diamond proxy address is required without a governance address")
            if bundle.transparent_upgrade is None or bundle.diamond_upgrade_proposal_id is None:
                raise MalformedArtifactError("Transaction bundle has no legacy upgrade proposal")
            to = to_checksum_address(zksync_address)
            hash_call = LegacyDiamondProxy.UPGRADE_PROPOSAL_HASH.encode(
                bundle.transparent_upgrade.abi_tuple(),
                bundle.diamond_upgrade_proposal_id,
                hex_to_bytes(ZERO_HASH),
            )
            (operation_id,) = LegacyDiamondProxy.UPGRADE_PROPOSAL_HASH.decode_output(
                self.client.eth_call(to, hash_call)
            )
            calldata = LegacyDiamondProxy.CANCEL_UPGRADE_PROPOSAL.encode(operation_id)

        result = CancelResult(operation_id=to_hex(operation_id), calldata=calldata, to=to)
        if execute:
            result.receipt = self.send_transaction(to, calldata, gas_price=gas_price, nonce=nonce)
        return result
