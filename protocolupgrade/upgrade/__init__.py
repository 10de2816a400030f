# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade transaction pipeline.

gather -> compose -> persist (build-default), then submit in a later run.
"""

from .paths import UpgradePaths
from .options import BuildOptions, SubmitOptions
from .gatherer import UpgradeInputs, gather_upgrade_inputs
from .composer import compose_bundle
from .persister import read_bundle, write_bundle
from .submitter import UpgradeSubmitter, CancelResult, fetch_next_proposal_id, select_transaction
from .builder import build_default_upgrade

__all__ = [
    "UpgradePaths",
    "BuildOptions",
    "SubmitOptions",
    "UpgradeInputs",
    "gather_upgrade_inputs",
    "compose_bundle",
    "read_bundle",
    "write_bundle",
    "UpgradeSubmitter",
    "CancelResult",
    "fetch_next_proposal_id",
    "select_transaction",
    "build_default_upgrade",
]
