"""
Tests for upgrade input gathering.

Tests:
- Zero-value defaults for every optional side-file
- Parsing of facet cuts, l2 upgrade, crypto and post-upgrade files
- Fatal errors for missing common data / requested post-upgrade calldata
"""
import json
import os

import pytest

from protocolupgrade.protocol.types.common import (
    ZERO_ADDRESS, ZERO_HASH, EMPTY_BYTES, FacetAction, L2TxType, MalformedArtifactError, MissingFileError,
)
from protocolupgrade.protocol.types.upgrade import VerifierParams
from protocolupgrade.upgrade.gatherer import gather_upgrade_inputs
from protocolupgrade.upgrade.paths import UpgradePaths, latest_upgrade_name


def write_json(path, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f)


@pytest.fixture
def paths(tmp_path):
    paths = UpgradePaths(upgrade_dir=str(tmp_path / "1700000000-upgrade"), environment="localhost")
    write_json(paths.common_data, {"protocolVersion": 24})
    return paths


# ═══════════════════════════════════════════════════════════════════
# DEFAULTS
# ═══════════════════════════════════════════════════════════════════

def test_missing_optional_files_use_zero_defaults(paths):
    inputs = gather_upgrade_inputs(paths)

    assert inputs.protocol_version == 24
    assert inputs.facet_cuts == []
    assert inputs.l2_upgrade_tx is None
    assert inputs.bootloader_hash == ZERO_HASH
    assert inputs.default_account_hash == ZERO_HASH
    assert inputs.forced_deployments == []
    assert inputs.verifier == ZERO_ADDRESS
    assert inputs.verifier_params == VerifierParams()
    assert inputs.verifier_params.recursion_node_level_vk_hash == ZERO_HASH
    assert inputs.post_upgrade_calldata == EMPTY_BYTES


def test_post_upgrade_file_ignored_without_flag(paths):
    write_json(paths.post_upgrade_calldata, "0xdeadbeef")
    inputs = gather_upgrade_inputs(paths, post_upgrade_calldata_flag=False)
    assert inputs.post_upgrade_calldata == EMPTY_BYTES


def test_missing_common_data_is_fatal(tmp_path):
    paths = UpgradePaths(upgrade_dir=str(tmp_path / "empty"))
    with pytest.raises(MissingFileError):
        gather_upgrade_inputs(paths)


def test_hex_protocol_version(paths):
    write_json(paths.common_data, {"protocolVersion": "0x18"})
    assert gather_upgrade_inputs(paths).protocol_version == 24


def test_invalid_protocol_version_is_fatal(paths):
    write_json(paths.common_data, {"protocolVersion": "twenty-four"})
    with pytest.raises(MalformedArtifactError):
        gather_upgrade_inputs(paths)


# ═══════════════════════════════════════════════════════════════════
# SIDE-FILES
# ═══════════════════════════════════════════════════════════════════

def test_reads_facet_cuts(paths):
    facet = "0x" + "ab" * 20
    write_json(paths.facet_cuts, [
        {"facet": facet, "selectors": ["0x12345678", "0xabcdef01"], "action": 1, "isFreezable": True},
    ])

    inputs = gather_upgrade_inputs(paths)

    assert len(inputs.facet_cuts) == 1
    cut = inputs.facet_cuts[0]
    assert cut.facet.lower() == facet
    assert cut.action == FacetAction.REPLACE
    assert cut.is_freezable is True
    assert cut.selectors == ["0x12345678", "0xabcdef01"]


def test_reads_l2_upgrade(paths):
    bootloader = "0x" + "01" * 32
    default_aa = "0x" + "02" * 32
    write_json(paths.l2_upgrade, {
        "tx": {
            "txType": 254,
            "from": "0x0000000000000000000000000000000000008007",
            "to": "0x0000000000000000000000000000000000008006",
            "gasLimit": "72000000",
            "gasPerPubdataByteLimit": 800,
            "data": "0x1234",
            "factoryDeps": ["0x" + "03" * 32],
        },
        "bootloader": {"bytecodeHashes": [bootloader]},
        "defaultAA": {"bytecodeHashes": [default_aa]},
        "forcedDeployments": [
            {
                "bytecodeHash": "0x" + "04" * 32,
                "newAddress": "0x0000000000000000000000000000000000008005",
                "callConstructor": False,
                "value": 0,
                "input": "0x",
            }
        ],
    })

    inputs = gather_upgrade_inputs(paths)

    tx = inputs.l2_upgrade_tx
    assert tx.tx_type == L2TxType.PROTOCOL_UPGRADE
    assert tx.from_address == 0x8007
    assert tx.to_address == 0x8006
    assert tx.gas_limit == 72_000_000
    assert tx.data == "0x1234"
    assert tx.factory_deps == [int("03" * 32, 16)]
    assert inputs.bootloader_hash == bootloader
    assert inputs.default_account_hash == default_aa
    assert len(inputs.forced_deployments) == 1


def test_l2_upgrade_without_hashes_keeps_zero_hashes(paths):
    write_json(paths.l2_upgrade, {"tx": {"txType": 254}})
    inputs = gather_upgrade_inputs(paths)
    assert inputs.bootloader_hash == ZERO_HASH
    assert inputs.default_account_hash == ZERO_HASH


def test_reads_crypto(paths):
    keys = {
        "recursionNodeLevelVkHash": "0x" + "05" * 32,
        "recursionLeafLevelVkHash": "0x" + "06" * 32,
        "recursionCircuitsSetVksHash": "0x" + "07" * 32,
    }
    write_json(paths.crypto, {"verifier": {"address": "0x" + "cd" * 20}, "keys": keys})

    inputs = gather_upgrade_inputs(paths)

    assert inputs.verifier.lower() == "0x" + "cd" * 20
    assert inputs.verifier_params.recursion_leaf_level_vk_hash == keys["recursionLeafLevelVkHash"]


def test_reads_post_upgrade_calldata_when_flagged(paths):
    write_json(paths.post_upgrade_calldata, "0xDEADBEEF")
    inputs = gather_upgrade_inputs(paths, post_upgrade_calldata_flag=True)
    assert inputs.post_upgrade_calldata == "0xdeadbeef"


def test_flagged_post_upgrade_calldata_missing_is_fatal(paths):
    with pytest.raises(MissingFileError, match="Post upgrade calldata file"):
        gather_upgrade_inputs(paths, post_upgrade_calldata_flag=True)


def test_malformed_json_is_fatal(paths):
    os.makedirs(paths.environment_dir, exist_ok=True)
    with open(paths.facet_cuts, "w") as f:
        f.write("[{not json")
    with pytest.raises(MalformedArtifactError):
        gather_upgrade_inputs(paths)


def test_bad_field_values_are_fatal(paths):
    write_json(paths.crypto, {"verifier": {"address": "not-an-address"}})
    with pytest.raises(MalformedArtifactError):
        gather_upgrade_inputs(paths)


# ═══════════════════════════════════════════════════════════════════
# PATHS
# ═══════════════════════════════════════════════════════════════════

def test_latest_upgrade_is_last_sorted_directory(tmp_path):
    for name in ["1690000000-old", "1700000000-new", "1695000000-mid"]:
        os.makedirs(tmp_path / name)
    (tmp_path / "README.md").write_text("not an upgrade")

    assert latest_upgrade_name(str(tmp_path)) == "1700000000-new"


def test_resolve_uses_environment_variables(tmp_path, monkeypatch):
    os.makedirs(tmp_path / "1700000000-new")
    monkeypatch.setenv("UPGRADE_ROOT", str(tmp_path))
    monkeypatch.delenv("UPGRADE_NAME", raising=False)
    monkeypatch.delenv("UPGRADE_ENVIRONMENT", raising=False)

    paths = UpgradePaths.resolve()

    assert paths.upgrade_dir == os.path.join(str(tmp_path), "1700000000-new")
    assert paths.environment == "localhost"
    assert paths.transactions.endswith(os.path.join("localhost", "transactions.json"))
