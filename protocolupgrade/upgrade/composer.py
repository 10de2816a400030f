# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade calldata composition.

Turns gathered inputs into the nested calldata of an upgrade:

    forceDeploy -> ComplexUpgrader.upgrade   (L2 tx data, optional)
    ProposedUpgrade -> DefaultUpgrade.upgrade (diamond cut init calldata)
    DiamondCutData -> STM / AdminFacet / legacy proxy calls
    single-call GovernanceOperation -> scheduleTransparent / execute
"""

import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from ..protocol.abi import (
    AdminFacet, ComplexUpgrader, DefaultUpgrade, ForceDeployUpgrader, Governance,
    LegacyDiamondProxy, StateTransitionManager,
)
from ..protocol.config.params import DEFAULT_GOVERNANCE_DELAY
from ..protocol.types.bundle import LegacyUpgradeData, RegistryUpgradeData, TransactionBundle
from ..protocol.types.common import EMPTY_BYTES, ZERO_ADDRESS, ZERO_HASH, MalformedArtifactError
from ..protocol.types.fields import hex_to_bytes, to_address
from ..protocol.types.upgrade import (
    DiamondCutData, FacetCut, ForceDeployment, GovernanceOperation,
    L2CanonicalTransaction, ProposedUpgrade, VerifierParams,
)
from .gatherer import UpgradeInputs
from .options import BuildOptions

logger = logging.getLogger(__name__)


def build_propose_upgrade(
    upgrade_timestamp: int,
    new_protocol_version: int,
    l1_contracts_upgrade_calldata: Optional[str] = None,
    post_upgrade_calldata: Optional[str] = None,
    verifier_params: Optional[VerifierParams] = None,
    bootloader_hash: Optional[str] = None,
    default_account_hash: Optional[str] = None,
    verifier: Optional[str] = None,
    new_allow_list: Optional[str] = None,
    l2_protocol_upgrade_tx: Optional[L2CanonicalTransaction] = None,
) -> ProposedUpgrade:
    """Build the upgrade description, filling every omitted field with its zero value."""
    return ProposedUpgrade(
        l2_protocol_upgrade_tx=l2_protocol_upgrade_tx or L2CanonicalTransaction.noop(),
        factory_deps=[],
        bootloader_hash=bootloader_hash or ZERO_HASH,
        default_account_hash=default_account_hash or ZERO_HASH,
        verifier=verifier or ZERO_ADDRESS,
        verifier_params=verifier_params or VerifierParams(),
        l1_contracts_upgrade_calldata=l1_contracts_upgrade_calldata or EMPTY_BYTES,
        post_upgrade_calldata=post_upgrade_calldata or EMPTY_BYTES,
        upgrade_timestamp=upgrade_timestamp,
        new_protocol_version=new_protocol_version,
        new_allow_list=new_allow_list or ZERO_ADDRESS,
    )


def force_deployment_calldata(deployments: List[ForceDeployment]) -> str:
    return ForceDeployUpgrader.FORCE_DEPLOY.encode([d.abi_tuple() for d in deployments])


def complex_upgrader_calldata(calldata: str, to: str) -> str:
    return ComplexUpgrader.UPGRADE.encode(to_address(to), hex_to_bytes(calldata))


def l2_upgrade_calldata(deployments: List[ForceDeployment], l2_upgrader_address: str) -> str:
    """Forced deployments delegated through the ComplexUpgrader system contract."""
    return complex_upgrader_calldata(force_deployment_calldata(deployments), l2_upgrader_address)


def l1_upgrade_calldata(upgrade: ProposedUpgrade) -> str:
    return DefaultUpgrade.UPGRADE.encode(upgrade.abi_tuple())


def governance_calls(operation: GovernanceOperation) -> Tuple[str, str]:
    """Returns (scheduleTransparent, execute) calldata for the governance contract."""
    schedule = Governance.SCHEDULE_TRANSPARENT.encode(operation.abi_tuple(), DEFAULT_GOVERNANCE_DELAY)
    execute = Governance.EXECUTE.encode(operation.abi_tuple())
    return schedule, execute


def decode_governance_operation(calldata: str) -> GovernanceOperation:
    """Recover the operation from `scheduleTransparent` or `execute` calldata."""
    selector = hex_to_bytes(calldata)[:4]
    if selector == Governance.SCHEDULE_TRANSPARENT.selector:
        operation, _delay = Governance.SCHEDULE_TRANSPARENT.decode_input(calldata)
    else:
        (operation,) = Governance.EXECUTE.decode_input(calldata)
    return GovernanceOperation.from_abi_tuple(operation)


def registry_upgrade_calldata(
    old_protocol_version: int,
    old_protocol_version_deadline: int,
    new_protocol_version: int,
    init_calldata: str,
    upgrade_address: str,
    facet_cuts: List[FacetCut],
    stm_address: str,
    zksync_address: str,
    chain_id: int,
) -> RegistryUpgradeData:
    """
    Calldata for an upgrade run through the governance contract.

    Three operations are wrapped, each as a single call with zero
    predecessor and zero salt:
    - STM.setNewVersionUpgrade, registering the cut for the new version
    - AdminFacet.upgradeChainFromVersion on the chain's diamond proxy
    - STM.executeUpgrade, applying the cut in one direct call
    """
    diamond_cut = DiamondCutData(
        facet_cuts=facet_cuts,
        init_address=upgrade_address,
        init_calldata=init_calldata,
    )

    stm_upgrade = StateTransitionManager.SET_NEW_VERSION_UPGRADE.encode(
        diamond_cut.abi_tuple(),
        old_protocol_version,
        old_protocol_version_deadline,
        new_protocol_version,
    )
    stm_operation = GovernanceOperation.single(stm_address, stm_upgrade)
    stm_schedule, stm_execute = governance_calls(stm_operation)

    proxy_upgrade = AdminFacet.UPGRADE_CHAIN_FROM_VERSION.encode(old_protocol_version, diamond_cut.abi_tuple())
    proxy_operation = GovernanceOperation.single(zksync_address, proxy_upgrade)
    schedule, execute = governance_calls(proxy_operation)

    stm_direct_upgrade = StateTransitionManager.EXECUTE_UPGRADE.encode(chain_id, diamond_cut.abi_tuple())
    stm_direct_operation = GovernanceOperation.single(stm_address, stm_direct_upgrade)
    stm_schedule_direct, stm_execute_direct = governance_calls(stm_direct_operation)

    return RegistryUpgradeData(
        stm_schedule_transparent_operation=stm_schedule,
        stm_execute_operation=stm_execute,
        schedule_transparent_operation=schedule,
        execute_operation=execute,
        stm_schedule_operation_direct=stm_schedule_direct,
        stm_execute_operation_direct=stm_execute_direct,
        governance_operation=proxy_operation,
        stm_governance_operation=stm_operation,
        stm_direct_governance_operation=stm_direct_operation,
        diamond_cut=diamond_cut,
    )


def legacy_upgrade_calldata(
    init_calldata: str,
    upgrade_address: str,
    facet_cuts: List[FacetCut],
    diamond_upgrade_proposal_id: int,
) -> LegacyUpgradeData:
    """Propose/execute calldata sent straight to the diamond proxy."""
    transparent_upgrade = DiamondCutData(
        facet_cuts=facet_cuts,
        init_address=upgrade_address,
        init_calldata=init_calldata,
    )
    propose = LegacyDiamondProxy.PROPOSE_TRANSPARENT_UPGRADE.encode(
        transparent_upgrade.abi_tuple(), diamond_upgrade_proposal_id
    )
    execute = LegacyDiamondProxy.EXECUTE_UPGRADE.encode(transparent_upgrade.abi_tuple(), hex_to_bytes(ZERO_HASH))
    return LegacyUpgradeData(
        transparent_upgrade=transparent_upgrade,
        propose_transparent_upgrade_calldata=propose,
        execute_upgrade_calldata=execute,
    )


def compose_bundle(inputs: UpgradeInputs, options: BuildOptions) -> TransactionBundle:
    """
    Compose every calldata variant of the upgrade.

    Exactly one governance mode is produced. With `use_new_governance` the
    proposal id is ignored and no legacy key is set.

    Raises:
        ValueError: legacy mode without a proposal id
        MalformedArtifactError: gathered values do not fit the upgrade structs
    """
    try:
        return _compose_bundle(inputs, options)
    except ValidationError as e:
        raise MalformedArtifactError(f"Invalid upgrade data: {e}")


def _compose_bundle(inputs: UpgradeInputs, options: BuildOptions) -> TransactionBundle:
    l2_tx = inputs.l2_upgrade_tx
    l2_calldata = None
    if options.l2_upgrader_address and inputs.forced_deployments:
        l2_calldata = l2_upgrade_calldata(inputs.forced_deployments, options.l2_upgrader_address)
        if l2_tx is not None:
            l2_tx = l2_tx.model_copy(update={"data": l2_calldata})
        else:
            logger.warning("Forced deployments given but l2Upgrade.json has no tx, L2 upgrade stays a no-op")

    proposed_upgrade = build_propose_upgrade(
        upgrade_timestamp=options.upgrade_timestamp,
        new_protocol_version=inputs.protocol_version,
        l1_contracts_upgrade_calldata=EMPTY_BYTES,
        post_upgrade_calldata=inputs.post_upgrade_calldata,
        verifier_params=inputs.verifier_params,
        bootloader_hash=inputs.bootloader_hash,
        default_account_hash=inputs.default_account_hash,
        verifier=inputs.verifier,
        new_allow_list=options.new_allow_list,
        l2_protocol_upgrade_tx=l2_tx,
    )
    l1_calldata = l1_upgrade_calldata(proposed_upgrade)

    bundle = dict(
        propose_upgrade_tx=proposed_upgrade,
        l1upgrade_calldata=l1_calldata,
        l2_upgrade_calldata=l2_calldata,
        upgrade_address=options.upgrade_address,
        protocol_version=inputs.protocol_version,
        upgrade_timestamp=options.upgrade_timestamp,
        bootloader_hash=proposed_upgrade.bootloader_hash,
        default_account_hash=proposed_upgrade.default_account_hash,
    )

    if options.use_new_governance:
        new_version = options.new_protocol_version
        if new_version is None:
            new_version = inputs.protocol_version
        old_version = options.old_protocol_version
        if old_version is None:
            old_version = max(new_version - 1, 0)
        upgrade_data = registry_upgrade_calldata(
            old_protocol_version=old_version,
            old_protocol_version_deadline=options.old_protocol_version_deadline,
            new_protocol_version=new_version,
            init_calldata=l1_calldata,
            upgrade_address=options.upgrade_address,
            facet_cuts=inputs.facet_cuts,
            stm_address=options.stm_address,
            zksync_address=options.zksync_address,
            chain_id=options.chain_id,
        )
    else:
        if options.diamond_upgrade_proposal_id is None:
            raise ValueError("Diamond upgrade proposal id is required without new governance")
        upgrade_data = legacy_upgrade_calldata(
            init_calldata=l1_calldata,
            upgrade_address=options.upgrade_address,
            facet_cuts=inputs.facet_cuts,
            diamond_upgrade_proposal_id=options.diamond_upgrade_proposal_id,
        )
        bundle["diamond_upgrade_proposal_id"] = options.diamond_upgrade_proposal_id

    bundle.update(dict(upgrade_data))
    return TransactionBundle(**bundle)
