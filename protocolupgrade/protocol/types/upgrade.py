# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade Description Types

Typed mirrors of the structs the L1/L2 upgrade contracts accept. Each record
knows how to flatten itself into the tuple layout eth-abi expects.
"""

from typing import List, Tuple

from eth_utils import to_checksum_address
from pydantic import Field

from .common import ZERO_ADDRESS, ZERO_HASH, EMPTY_BYTES, FacetAction, L2TxType
from .fields import (
    Address, Bytes4, Bytes32, CamelModel, HexBytes, Uint, hex_to_bytes,
)


class L2CanonicalTransaction(CamelModel):
    """
    System transaction executed on L2 as part of the upgrade.

    Fields `from`, `to` and `paymaster` are uint256 on the contract side,
    so addresses given in the side-file are kept as integers.
    """
    tx_type: Uint = int(L2TxType.NOOP)
    from_address: Uint = Field(default=0, alias="from")
    to_address: Uint = Field(default=0, alias="to")
    gas_limit: Uint = 0
    gas_per_pubdata_byte_limit: Uint = 0
    max_fee_per_gas: Uint = 0
    max_priority_fee_per_gas: Uint = 0
    paymaster: Uint = 0
    nonce: Uint = 0
    value: Uint = 0
    reserved: Tuple[Uint, Uint, Uint, Uint] = (0, 0, 0, 0)
    data: HexBytes = EMPTY_BYTES
    signature: HexBytes = EMPTY_BYTES
    factory_deps: List[Uint] = Field(default_factory=list)
    paymaster_input: HexBytes = EMPTY_BYTES
    reserved_dynamic: HexBytes = EMPTY_BYTES

    @classmethod
    def noop(cls) -> "L2CanonicalTransaction":
        return cls()

    @property
    def is_noop(self) -> bool:
        return self.tx_type == L2TxType.NOOP

    def abi_tuple(self) -> tuple:
        return (
            self.tx_type,
            self.from_address,
            self.to_address,
            self.gas_limit,
            self.gas_per_pubdata_byte_limit,
            self.max_fee_per_gas,
            self.max_priority_fee_per_gas,
            self.paymaster,
            self.nonce,
            self.value,
            list(self.reserved),
            hex_to_bytes(self.data),
            hex_to_bytes(self.signature),
            list(self.factory_deps),
            hex_to_bytes(self.paymaster_input),
            hex_to_bytes(self.reserved_dynamic),
        )


class VerifierParams(CamelModel):
    recursion_node_level_vk_hash: Bytes32 = ZERO_HASH
    recursion_leaf_level_vk_hash: Bytes32 = ZERO_HASH
    recursion_circuits_set_vks_hash: Bytes32 = ZERO_HASH

    def abi_tuple(self) -> tuple:
        return (
            hex_to_bytes(self.recursion_node_level_vk_hash),
            hex_to_bytes(self.recursion_leaf_level_vk_hash),
            hex_to_bytes(self.recursion_circuits_set_vks_hash),
        )


class ProposedUpgrade(CamelModel):
    """
    Full payload of a protocol upgrade, passed to DefaultUpgrade.upgrade().

    Exactly one L2 transaction is embedded; when the upgrade has no L2 side
    the canonical no-op transaction is used.
    """
    l2_protocol_upgrade_tx: L2CanonicalTransaction = Field(default_factory=L2CanonicalTransaction.noop)
    factory_deps: List[HexBytes] = Field(default_factory=list)
    bootloader_hash: Bytes32 = ZERO_HASH
    default_account_hash: Bytes32 = ZERO_HASH
    verifier: Address = ZERO_ADDRESS
    verifier_params: VerifierParams = Field(default_factory=VerifierParams)
    l1_contracts_upgrade_calldata: HexBytes = EMPTY_BYTES
    post_upgrade_calldata: HexBytes = EMPTY_BYTES
    upgrade_timestamp: Uint
    new_protocol_version: Uint
    new_allow_list: Address = ZERO_ADDRESS

    def abi_tuple(self) -> tuple:
        return (
            self.l2_protocol_upgrade_tx.abi_tuple(),
            [hex_to_bytes(dep) for dep in self.factory_deps],
            hex_to_bytes(self.bootloader_hash),
            hex_to_bytes(self.default_account_hash),
            self.verifier,
            self.verifier_params.abi_tuple(),
            hex_to_bytes(self.l1_contracts_upgrade_calldata),
            hex_to_bytes(self.post_upgrade_calldata),
            self.upgrade_timestamp,
            self.new_protocol_version,
            self.new_allow_list,
        )


class ForceDeployment(CamelModel):
    bytecode_hash: Bytes32           # bytecode hash to put on the address
    new_address: Address
    call_constructor: bool = False
    value: Uint = 0                  # value passed to the constructor
    input: HexBytes = EMPTY_BYTES    # constructor calldata

    def abi_tuple(self) -> tuple:
        return (
            hex_to_bytes(self.bytecode_hash),
            self.new_address,
            self.call_constructor,
            self.value,
            hex_to_bytes(self.input),
        )


class FacetCut(CamelModel):
    facet: Address
    action: FacetAction
    is_freezable: bool = False
    selectors: List[Bytes4] = Field(default_factory=list)

    def abi_tuple(self) -> tuple:
        return (
            self.facet,
            int(self.action),
            self.is_freezable,
            [hex_to_bytes(selector) for selector in self.selectors],
        )


class DiamondCutData(CamelModel):
    """Facet cuts plus the initializer, validated on-chain as one upgrade step."""
    facet_cuts: List[FacetCut] = Field(default_factory=list)
    init_address: Address = ZERO_ADDRESS
    init_calldata: HexBytes = EMPTY_BYTES

    def abi_tuple(self) -> tuple:
        return (
            [cut.abi_tuple() for cut in self.facet_cuts],
            self.init_address,
            hex_to_bytes(self.init_calldata),
        )


class Call(CamelModel):
    target: Address
    value: Uint = 0
    data: HexBytes = EMPTY_BYTES

    def abi_tuple(self) -> tuple:
        return (self.target, self.value, hex_to_bytes(self.data))


class GovernanceOperation(CamelModel):
    """
    Batch of calls scheduled and executed by the governance contract.

    The operation id is whatever Governance.hashOperation() returns for it.
    """
    calls: List[Call]
    predecessor: Bytes32 = ZERO_HASH
    salt: Bytes32 = ZERO_HASH

    @classmethod
    def single(cls, target: str, data: str, value: int = 0) -> "GovernanceOperation":
        return cls(calls=[Call(target=target, value=value, data=data)])

    def abi_tuple(self) -> tuple:
        return (
            [call.abi_tuple() for call in self.calls],
            hex_to_bytes(self.predecessor),
            hex_to_bytes(self.salt),
        )

    @classmethod
    def from_abi_tuple(cls, decoded: tuple) -> "GovernanceOperation":
        calls, predecessor, salt = decoded
        return cls(
            calls=[
                Call(target=to_checksum_address(target), value=value, data=data)
                for target, value, data in calls
            ],
            predecessor=predecessor,
            salt=salt,
        )
