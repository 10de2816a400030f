# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade input gathering.

Collects the side-files written by earlier upgrade steps. Every file except
common data is optional and falls back to a zero value when absent.
"""

import json
import logging
import os
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..protocol.types.common import (
    EMPTY_BYTES, ZERO_ADDRESS, ZERO_HASH, MalformedArtifactError, MissingFileError,
)
from ..protocol.types.fields import to_address, to_hex_bytes, to_uint
from ..protocol.types.upgrade import (
    FacetCut, ForceDeployment, L2CanonicalTransaction, VerifierParams,
)
from .paths import UpgradePaths

logger = logging.getLogger(__name__)


class UpgradeInputs(BaseModel):
    """Everything read from disk for one build, with defaults already applied."""
    protocol_version: int
    facet_cuts: List[FacetCut] = Field(default_factory=list)
    l2_upgrade_tx: Optional[L2CanonicalTransaction] = None  # None: no-op tx
    bootloader_hash: str = ZERO_HASH
    default_account_hash: str = ZERO_HASH
    forced_deployments: List[ForceDeployment] = Field(default_factory=list)
    verifier: str = ZERO_ADDRESS
    verifier_params: VerifierParams = Field(default_factory=VerifierParams)
    post_upgrade_calldata: str = EMPTY_BYTES


def read_json_file(path: str) -> Any:
    if not os.path.exists(path):
        raise MissingFileError(f"File {path} not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedArtifactError(f"Failed to parse {path}: {e}")


def _validated(path: str, build):
    try:
        return build()
    except (ValidationError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        raise MalformedArtifactError(f"Unexpected contents in {path}: {e}")


def read_protocol_version(paths: UpgradePaths) -> int:
    common = read_json_file(paths.common_data)
    return _validated(paths.common_data, lambda: to_uint(common["protocolVersion"]))


def read_facet_cuts(paths: UpgradePaths) -> List[FacetCut]:
    if not os.path.exists(paths.facet_cuts):
        return []
    logger.info(f"Found facet cuts file {paths.facet_cuts}")
    raw = read_json_file(paths.facet_cuts)
    return _validated(paths.facet_cuts, lambda: [FacetCut.model_validate(cut) for cut in raw])


def gather_upgrade_inputs(paths: UpgradePaths, post_upgrade_calldata_flag: bool = False) -> UpgradeInputs:
    """
    Read all side-files for an environment.

    Args:
        paths: Resolved upgrade directory layout
        post_upgrade_calldata_flag: Require and include postUpgradeCalldata.json

    Raises:
        MissingFileError: common data missing, or the post-upgrade calldata
            file is requested but missing
        MalformedArtifactError: a file exists but cannot be parsed
    """
    inputs = UpgradeInputs(
        protocol_version=read_protocol_version(paths),
        facet_cuts=read_facet_cuts(paths),
    )

    if os.path.exists(paths.l2_upgrade):
        logger.info(f"Found l2 upgrade file {paths.l2_upgrade}")
        l2_upgrade = read_json_file(paths.l2_upgrade)

        def parse_l2_upgrade():
            if l2_upgrade.get("tx") is not None:
                inputs.l2_upgrade_tx = L2CanonicalTransaction.model_validate(l2_upgrade["tx"])
            if l2_upgrade.get("bootloader"):
                inputs.bootloader_hash = to_hex_bytes(l2_upgrade["bootloader"]["bytecodeHashes"][0])
            if l2_upgrade.get("defaultAA"):
                inputs.default_account_hash = to_hex_bytes(l2_upgrade["defaultAA"]["bytecodeHashes"][0])
            inputs.forced_deployments = [
                ForceDeployment.model_validate(deployment)
                for deployment in l2_upgrade.get("forcedDeployments") or []
            ]

        _validated(paths.l2_upgrade, parse_l2_upgrade)

    if os.path.exists(paths.crypto):
        logger.info(f"Found crypto file {paths.crypto}")
        crypto = read_json_file(paths.crypto)

        def parse_crypto():
            if crypto.get("verifier"):
                inputs.verifier = to_address(crypto["verifier"]["address"])
            if crypto.get("keys"):
                inputs.verifier_params = VerifierParams.model_validate(crypto["keys"])

        _validated(paths.crypto, parse_crypto)

    if post_upgrade_calldata_flag:
        if not os.path.exists(paths.post_upgrade_calldata):
            raise MissingFileError(f"Post upgrade calldata file {paths.post_upgrade_calldata} not found")
        logger.info(f"Found post upgrade calldata file {paths.post_upgrade_calldata}")
        raw = read_json_file(paths.post_upgrade_calldata)
        inputs.post_upgrade_calldata = _validated(paths.post_upgrade_calldata, lambda: to_hex_bytes(raw))

    return inputs
