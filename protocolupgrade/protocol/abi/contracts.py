# MIT License
# Copyright (c) 2025 Hashborn

"""
Contract Function Definitions

The handful of upgrade-related functions this tool calls, described by
their canonical ABI signatures.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, function_signature_to_4byte_selector

from ..types.common import RpcError

# Struct layouts
FACET_CUT = "(address,uint8,bool,bytes4[])"
DIAMOND_CUT_DATA = f"({FACET_CUT}[],address,bytes)"
L2_CANONICAL_TX = (
    "(uint256,uint256,uint256,uint256,uint256,uint256,uint256,uint256,uint256,uint256,"
    "uint256[4],bytes,bytes,uint256[],bytes,bytes)"
)
VERIFIER_PARAMS = "(bytes32,bytes32,bytes32)"
PROPOSED_UPGRADE = (
    f"({L2_CANONICAL_TX},bytes[],bytes32,bytes32,address,{VERIFIER_PARAMS},"
    "bytes,bytes,uint256,uint256,address)"
)
FORCE_DEPLOYMENT = "(bytes32,address,bool,uint256,bytes)"
CALL = "(address,uint256,bytes)"
OPERATION = f"({CALL}[],bytes32,bytes32)"


def _as_bytes(data: Union[str, bytes]) -> bytes:
    return decode_hex(data) if isinstance(data, str) else bytes(data)


@dataclass(frozen=True)
class ContractFunction:
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, *args) -> str:
        """Returns 0x-prefixed calldata for a call with the given arguments."""
        if len(args) != len(self.inputs):
            raise ValueError(f"{self.name} takes {len(self.inputs)} arguments, got {len(args)}")
        return "0x" + (self.selector + encode(list(self.inputs), list(args))).hex()

    def decode_input(self, calldata: Union[str, bytes]) -> tuple:
        raw = _as_bytes(calldata)
        if raw[:4] != self.selector:
            raise ValueError(f"Calldata does not start with the {self.name} selector")
        try:
            return decode(list(self.inputs), raw[4:])
        except DecodingError as e:
            raise ValueError(f"Invalid {self.name} calldata: {e}")

    def decode_output(self, data: Union[str, bytes, None]) -> tuple:
        """Decode an eth_call result. Empty or undecodable data raises RpcError."""
        try:
            raw = _as_bytes(data)
        except (TypeError, ValueError) as e:
            raise RpcError(f"{self.name} returned invalid data {data!r}: {e}")
        if not raw:
            raise RpcError(f"{self.name} returned no data, is there a contract at the target address?")
        try:
            return decode(list(self.outputs), raw)
        except DecodingError as e:
            raise RpcError(f"{self.name} returned undecodable data: {e}")


class ForceDeployUpgrader:
    FORCE_DEPLOY = ContractFunction("forceDeploy", (f"{FORCE_DEPLOYMENT}[]",))


class ComplexUpgrader:
    UPGRADE = ContractFunction("upgrade", ("address", "bytes"))


class DefaultUpgrade:
    UPGRADE = ContractFunction("upgrade", (PROPOSED_UPGRADE,))


class StateTransitionManager:
    SET_NEW_VERSION_UPGRADE = ContractFunction(
        "setNewVersionUpgrade", (DIAMOND_CUT_DATA, "uint256", "uint256", "uint256")
    )
    EXECUTE_UPGRADE = ContractFunction("executeUpgrade", ("uint256", DIAMOND_CUT_DATA))


class AdminFacet:
    UPGRADE_CHAIN_FROM_VERSION = ContractFunction("upgradeChainFromVersion", ("uint256", DIAMOND_CUT_DATA))


class Governance:
    SCHEDULE_TRANSPARENT = ContractFunction("scheduleTransparent", (OPERATION, "uint256"))
    EXECUTE = ContractFunction("execute", (OPERATION,))
    HASH_OPERATION = ContractFunction("hashOperation", (OPERATION,), ("bytes32",))
    CANCEL = ContractFunction("cancel", ("bytes32",))


class LegacyDiamondProxy:
    """Pre-governance diamond proxy interface (proposal-id based upgrades)."""
    PROPOSE_TRANSPARENT_UPGRADE = ContractFunction("proposeTransparentUpgrade", (DIAMOND_CUT_DATA, "uint40"))
    EXECUTE_UPGRADE = ContractFunction("executeUpgrade", (DIAMOND_CUT_DATA, "bytes32"))
    UPGRADE_PROPOSAL_HASH = ContractFunction(
        "upgradeProposalHash", (DIAMOND_CUT_DATA, "uint256", "bytes32"), ("bytes32",)
    )
    CANCEL_UPGRADE_PROPOSAL = ContractFunction("cancelUpgradeProposal", ("bytes32",))
    GET_CURRENT_PROPOSAL_ID = ContractFunction("getCurrentProposalId", (), ("uint256",))
