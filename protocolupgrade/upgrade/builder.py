# MIT License
# Copyright (c) 2025 Hashborn

"""
Default upgrade build: gather, compose, persist.

The legacy proposal-id lookup is kept for library callers only; the CLI
rejects legacy mode before reaching it.
"""

import logging

from ..protocol.types.bundle import TransactionBundle
from ..rpc.client import JsonRpcClient
from .composer import compose_bundle
from .gatherer import gather_upgrade_inputs
from .options import BuildOptions
from .paths import UpgradePaths
from .persister import write_bundle
from .submitter import fetch_next_proposal_id

logger = logging.getLogger(__name__)


def build_default_upgrade(paths: UpgradePaths, options: BuildOptions) -> TransactionBundle:
    """
    Gather, compose and persist the default upgrade transactions.

    The bundle is only written once composition succeeded, so a failed
    build leaves a previous transactions.json untouched.
    """
    inputs = gather_upgrade_inputs(paths, options.post_upgrade_calldata)
    logger.info(
        f"Building default upgrade tx for {paths.environment} protocol version "
        f"{inputs.protocol_version} upgradeTimestamp {options.upgrade_timestamp}"
    )

    if not options.use_new_governance and options.diamond_upgrade_proposal_id is None:
        client = JsonRpcClient(options.l1rpc)
        options = options.model_copy(
            update={"diamond_upgrade_proposal_id": fetch_next_proposal_id(client, options.zksync_address)}
        )

    bundle = compose_bundle(inputs, options)
    write_bundle(bundle, paths.transactions)
    logger.info("Default upgrade transactions are generated")
    return bundle
