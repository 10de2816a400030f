# MIT License
# Copyright (c) 2025 Hashborn

"""
Typed options for the `transactions` commands.

Flags that are absent on the command line fall back to the environment
once, here, so the pipeline below only ever sees resolved values.
"""

import logging
import os
from typing import Any, Optional

from pydantic import BaseModel

from ..protocol.config.params import (
    DEFAULT_L1_RPC, ENV_CHAIN_ID, ENV_DEFAULT_UPGRADE, ENV_DIAMOND_PROXY, ENV_L1_RPC, ENV_STM,
)
from ..protocol.types.common import ZERO_ADDRESS, UnsupportedFeatureError
from ..protocol.types.fields import Address, Uint

logger = logging.getLogger(__name__)

LEGACY_GOVERNANCE_ERROR = "Old governance is not supported anymore"


def env_or_default(value: Any, env_name: str, default: Any = None, label: Optional[str] = None) -> Any:
    if value is not None:
        return value
    env_value = os.environ.get(env_name)
    if env_value:
        return env_value
    if label:
        logger.warning(f"No {label} given and {env_name} is not set, using {default}")
    return default


def resolve_l1_rpc(value: Optional[str]) -> str:
    return env_or_default(value, ENV_L1_RPC, DEFAULT_L1_RPC)


class BuildOptions(BaseModel):
    """Options of `build-default`."""
    upgrade_timestamp: Uint
    environment: Optional[str] = None
    upgrade_address: Address = ZERO_ADDRESS
    new_allow_list: Address = ZERO_ADDRESS
    l2_upgrader_address: Optional[Address] = None
    diamond_upgrade_proposal_id: Optional[Uint] = None
    l1rpc: str = DEFAULT_L1_RPC
    zksync_address: Address = ZERO_ADDRESS
    stm_address: Address = ZERO_ADDRESS
    chain_id: Uint = 0
    use_new_governance: bool = False
    post_upgrade_calldata: bool = False
    old_protocol_version: Optional[Uint] = None
    old_protocol_version_deadline: Uint = 0
    new_protocol_version: Optional[Uint] = None

    @classmethod
    def from_args(cls, args) -> "BuildOptions":
        if not args.use_new_governance:
            raise UnsupportedFeatureError(LEGACY_GOVERNANCE_ERROR)
        return cls(
            upgrade_timestamp=args.upgrade_timestamp,
            environment=args.environment,
            upgrade_address=env_or_default(args.upgrade_address, ENV_DEFAULT_UPGRADE, ZERO_ADDRESS, "upgrade address"),
            new_allow_list=args.new_allow_list or ZERO_ADDRESS,
            l2_upgrader_address=args.l2_upgrader_address,
            diamond_upgrade_proposal_id=args.diamond_upgrade_proposal_id,
            l1rpc=resolve_l1_rpc(args.l1rpc),
            zksync_address=env_or_default(args.zksync_address, ENV_DIAMOND_PROXY, ZERO_ADDRESS, "diamond proxy address"),
            stm_address=env_or_default(args.stm_address, ENV_STM, ZERO_ADDRESS, "STM address"),
            chain_id=env_or_default(args.chain_id, ENV_CHAIN_ID, 0, "chain id"),
            use_new_governance=args.use_new_governance,
            post_upgrade_calldata=args.post_upgrade_calldata,
            old_protocol_version=args.old_protocol_version,
            old_protocol_version_deadline=args.old_protocol_version_deadline or 0,
            new_protocol_version=args.new_protocol_version,
        )


class SubmitOptions(BaseModel):
    """Options shared by the propose/execute/cancel commands."""
    environment: Optional[str] = None
    private_key: Optional[str] = None
    gas_price: Optional[Uint] = None
    nonce: Optional[Uint] = None
    l1rpc: str = DEFAULT_L1_RPC
    new_governance: Optional[Address] = None
    zksync_address: Optional[Address] = None
    execute: bool = False

    @classmethod
    def from_args(cls, args) -> "SubmitOptions":
        if not args.new_governance:
            raise UnsupportedFeatureError(LEGACY_GOVERNANCE_ERROR)
        return cls(
            environment=args.environment,
            private_key=args.private_key,
            gas_price=args.gas_price,
            nonce=args.nonce,
            l1rpc=resolve_l1_rpc(args.l1rpc),
            new_governance=args.new_governance,
            zksync_address=env_or_default(getattr(args, "zksync_address", None), ENV_DIAMOND_PROXY),
            execute=getattr(args, "execute", False),
        )
