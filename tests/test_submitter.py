"""
Tests for upgrade submission and cancellation.

Tests:
- Operation -> (target, bundle key) selection
- Signing, gas price / nonce passthrough and fetching
- Dry-run vs executed cancel
"""
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from eth_utils import to_checksum_address

from protocolupgrade.protocol.abi import Governance, LegacyDiamondProxy
from protocolupgrade.protocol.types.common import (
    MalformedArtifactError, MissingFileError, ProtocolError, RpcError, SubmitOperation,
    UnsupportedFeatureError,
)
from protocolupgrade.upgrade.composer import compose_bundle, decode_governance_operation
from protocolupgrade.upgrade.gatherer import UpgradeInputs
from protocolupgrade.upgrade.options import BuildOptions
from protocolupgrade.upgrade.persister import write_bundle
from protocolupgrade.upgrade.submitter import OPERATION_KEYS, UpgradeSubmitter, select_transaction

GOVERNANCE = to_checksum_address("0x" + "77" * 20)
PROXY = to_checksum_address("0x" + "33" * 20)
STM = to_checksum_address("0x" + "22" * 20)
OPERATION_ID = bytes.fromhex("ab" * 32)


@pytest.fixture
def bundle():
    options = BuildOptions(
        upgrade_timestamp=1700000000, zksync_address=PROXY, stm_address=STM, use_new_governance=True,
    )
    return compose_bundle(UpgradeInputs(protocol_version=24), options)


@pytest.fixture
def legacy_bundle():
    options = BuildOptions(upgrade_timestamp=1700000000, zksync_address=PROXY, diamond_upgrade_proposal_id=2)
    return compose_bundle(UpgradeInputs(protocol_version=24), options)


@pytest.fixture
def bundle_path(tmp_path, bundle):
    path = str(tmp_path / "localhost" / "transactions.json")
    write_bundle(bundle, path)
    return path


@pytest.fixture
def wallet():
    return Account.from_key("0x" + "11" * 32)


@pytest.fixture
def client():
    client = MagicMock()
    client.gas_price.return_value = 5_000_000_000
    client.get_transaction_count.return_value = 3
    client.chain_id.return_value = 9
    client.send_raw_transaction.return_value = "0x" + "cc" * 32
    client.wait_for_receipt.return_value = {"status": "0x1", "transactionHash": "0x" + "cc" * 32}
    client.eth_call.return_value = "0x" + OPERATION_ID.hex()
    return client


# ═══════════════════════════════════════════════════════════════════
# SELECTION
# ═══════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("operation", list(SubmitOperation))
def test_new_governance_targets_governance(bundle, operation):
    to, calldata = select_transaction(bundle, operation, GOVERNANCE)
    registry_key, _ = OPERATION_KEYS[operation]
    assert to == GOVERNANCE
    assert calldata == bundle.calldata(registry_key)


def test_execute_upgrade_selects_execute_operation(bundle):
    _to, calldata = select_transaction(bundle, SubmitOperation.EXECUTE_UPGRADE, GOVERNANCE)
    assert calldata == bundle.execute_operation
    assert decode_governance_operation(calldata).calls[0].target == PROXY


def test_legacy_propose_targets_proxy(legacy_bundle):
    to, calldata = select_transaction(legacy_bundle, SubmitOperation.PROPOSE_UPGRADE, None, PROXY)
    assert to == PROXY
    assert calldata == legacy_bundle.propose_transparent_upgrade_calldata


def test_legacy_stm_operations_unsupported(legacy_bundle):
    with pytest.raises(UnsupportedFeatureError):
        select_transaction(legacy_bundle, SubmitOperation.PROPOSE_UPGRADE_STM, None, PROXY)


def test_legacy_requires_proxy_address(legacy_bundle):
    with pytest.raises(ProtocolError):
        select_transaction(legacy_bundle, SubmitOperation.EXECUTE_UPGRADE, None)


def test_mode_mismatch_is_malformed(legacy_bundle):
    with pytest.raises(MalformedArtifactError):
        select_transaction(legacy_bundle, SubmitOperation.EXECUTE_UPGRADE, GOVERNANCE)


# ═══════════════════════════════════════════════════════════════════
# SENDING
# ═══════════════════════════════════════════════════════════════════

def test_submit_signs_and_sends(bundle_path, bundle, client, wallet):
    submitter = UpgradeSubmitter(client, wallet)

    receipt = submitter.submit(bundle_path, SubmitOperation.PROPOSE_UPGRADE, GOVERNANCE)

    assert receipt["transactionHash"] == "0x" + "cc" * 32
    client.gas_price.assert_called_once()
    client.get_transaction_count.assert_called_once_with(wallet.address)
    (raw_tx,) = client.send_raw_transaction.call_args.args
    assert Account.recover_transaction(raw_tx) == wallet.address
    client.wait_for_receipt.assert_called_once()


def test_explicit_gas_price_and_nonce_are_used(bundle_path, client, wallet):
    submitter = UpgradeSubmitter(client, wallet)

    submitter.submit(bundle_path, SubmitOperation.EXECUTE_UPGRADE, GOVERNANCE, gas_price=7, nonce=42)

    client.gas_price.assert_not_called()
    client.get_transaction_count.assert_not_called()


def test_send_without_wallet_fails(bundle_path, client):
    with pytest.raises(ProtocolError):
        UpgradeSubmitter(client).submit(bundle_path, SubmitOperation.PROPOSE_UPGRADE, GOVERNANCE)
    client.send_raw_transaction.assert_not_called()


# ═══════════════════════════════════════════════════════════════════
# CANCEL
# ═══════════════════════════════════════════════════════════════════

def test_dry_run_cancel_sends_nothing(bundle_path, bundle, client):
    result = UpgradeSubmitter(client).cancel_upgrade(bundle_path, GOVERNANCE)

    assert result.operation_id == "0x" + OPERATION_ID.hex()
    assert result.calldata == Governance.CANCEL.encode(OPERATION_ID)
    assert result.to == GOVERNANCE
    assert result.receipt is None
    client.send_raw_transaction.assert_not_called()

    to, data = client.eth_call.call_args.args
    assert to == GOVERNANCE
    (operation,) = Governance.HASH_OPERATION.decode_input(data)
    assert to_checksum_address(operation[0][0][0]) == PROXY


def test_executed_cancel_sends_transaction(bundle_path, client, wallet):
    result = UpgradeSubmitter(client, wallet).cancel_upgrade(bundle_path, GOVERNANCE, execute=True)

    assert result.receipt["status"] == "0x1"
    client.send_raw_transaction.assert_called_once()


def test_legacy_cancel(tmp_path, legacy_bundle, client):
    path = str(tmp_path / "transactions.json")
    write_bundle(legacy_bundle, path)

    result = UpgradeSubmitter(client).cancel_upgrade(path, None, zksync_address=PROXY)

    assert result.to == PROXY
    assert result.calldata == LegacyDiamondProxy.CANCEL_UPGRADE_PROPOSAL.encode(OPERATION_ID)
    _cut, proposal_id, _salt = LegacyDiamondProxy.UPGRADE_PROPOSAL_HASH.decode_input(client.eth_call.call_args.args[1])
    assert proposal_id == 2


def test_cancel_needs_bundle(tmp_path, client):
    with pytest.raises(MissingFileError):
        UpgradeSubmitter(client).cancel_upgrade(str(tmp_path / "transactions.json"), GOVERNANCE)


def test_cancel_against_address_without_code(bundle_path, client):
    client.eth_call.return_value = "0x"
    with pytest.raises(RpcError, match="no data"):
        UpgradeSubmitter(client).cancel_upgrade(bundle_path, GOVERNANCE)
    client.send_raw_transaction.assert_not_called()
