# MIT License
# Copyright (c) 2025 Hashborn

"""
Transaction Bundle

Hand-off artifact between `build-default` and the submit commands.
"""

from typing import Optional

from .fields import Address, Bytes32, CamelModel, HexBytes, Uint
from .upgrade import DiamondCutData, GovernanceOperation, ProposedUpgrade

REGISTRY_CALLDATA_KEYS = (
    "stmScheduleTransparentOperation",
    "stmExecuteOperation",
    "scheduleTransparentOperation",
    "executeOperation",
    "stmScheduleOperationDirect",
    "stmExecuteOperationDirect",
)

LEGACY_KEYS = (
    "diamondUpgradeProposalId",
    "transparentUpgrade",
    "proposeTransparentUpgradeCalldata",
    "executeUpgradeCalldata",
)


class RegistryUpgradeData(CamelModel):
    """Calldata produced when the upgrade goes through the governance contract."""
    stm_schedule_transparent_operation: HexBytes
    stm_execute_operation: HexBytes
    schedule_transparent_operation: HexBytes
    execute_operation: HexBytes
    stm_schedule_operation_direct: HexBytes
    stm_execute_operation_direct: HexBytes
    governance_operation: GovernanceOperation
    stm_governance_operation: GovernanceOperation
    stm_direct_governance_operation: GovernanceOperation
    diamond_cut: DiamondCutData


class LegacyUpgradeData(CamelModel):
    """Calldata for proposing straight to the diamond proxy."""
    transparent_upgrade: DiamondCutData
    propose_transparent_upgrade_calldata: HexBytes
    execute_upgrade_calldata: HexBytes


class TransactionBundle(CamelModel):
    """
    Every calldata variant of one upgrade, keyed by operation name, plus the
    metadata echoed back by the submit commands.

    Either the registry fields or the legacy fields are set, never both.
    """
    propose_upgrade_tx: ProposedUpgrade
    l1upgrade_calldata: HexBytes
    l2_upgrade_calldata: Optional[HexBytes] = None
    upgrade_address: Address
    protocol_version: Uint
    upgrade_timestamp: Uint
    bootloader_hash: Bytes32
    default_account_hash: Bytes32
    diamond_upgrade_proposal_id: Optional[Uint] = None

    # registry-governed
    stm_schedule_transparent_operation: Optional[HexBytes] = None
    stm_execute_operation: Optional[HexBytes] = None
    schedule_transparent_operation: Optional[HexBytes] = None
    execute_operation: Optional[HexBytes] = None
    stm_schedule_operation_direct: Optional[HexBytes] = None
    stm_execute_operation_direct: Optional[HexBytes] = None
    governance_operation: Optional[GovernanceOperation] = None
    stm_governance_operation: Optional[GovernanceOperation] = None
    stm_direct_governance_operation: Optional[GovernanceOperation] = None
    diamond_cut: Optional[DiamondCutData] = None

    # legacy diamond proxy
    transparent_upgrade: Optional[DiamondCutData] = None
    propose_transparent_upgrade_calldata: Optional[HexBytes] = None
    execute_upgrade_calldata: Optional[HexBytes] = None

    @property
    def uses_new_governance(self) -> bool:
        return self.governance_operation is not None

    def calldata(self, key: str) -> Optional[str]:
        """Look up a calldata blob by its JSON key (e.g. 'executeOperation')."""
        for name, field in type(self).model_fields.items():
            if field.alias == key:
                return getattr(self, name)
        raise KeyError(f"Unknown bundle key: {key}")
