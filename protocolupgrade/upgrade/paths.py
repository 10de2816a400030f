# MIT License
# Copyright (c) 2025 Hashborn

"""
Upgrade directory layout.

    <root>/<upgrade>/common.json
    <root>/<upgrade>/<environment>/facetCuts.json
    <root>/<upgrade>/<environment>/l2Upgrade.json
    <root>/<upgrade>/<environment>/crypto.json
    <root>/<upgrade>/<environment>/postUpgradeCalldata.json
    <root>/<upgrade>/<environment>/transactions.json
"""

import os
from dataclasses import dataclass
from typing import Optional

from ..protocol.config.params import (
    COMMON_DATA_FILE, CRYPTO_FILE, DEFAULT_ENVIRONMENT, ENV_UPGRADE_ENVIRONMENT,
    ENV_UPGRADE_NAME, ENV_UPGRADE_ROOT, ENV_ZKSYNC_HOME, FACET_CUTS_FILE,
    L2_UPGRADE_FILE, POST_UPGRADE_CALLDATA_FILE, TRANSACTIONS_FILE, UPGRADES_SUBDIR,
)
from ..protocol.types.common import MissingFileError


def default_upgrades_root() -> str:
    root = os.environ.get(ENV_UPGRADE_ROOT)
    if root:
        return root
    home = os.environ.get(ENV_ZKSYNC_HOME)
    if home:
        return os.path.join(home, UPGRADES_SUBDIR)
    return UPGRADES_SUBDIR


def latest_upgrade_name(root: str) -> str:
    """Upgrade directories are date-prefixed, so the last one sorted is the newest."""
    if not os.path.isdir(root):
        raise MissingFileError(f"Upgrades directory {root} not found")
    names = sorted(
        name for name in os.listdir(root)
        if os.path.isdir(os.path.join(root, name))
    )
    if not names:
        raise MissingFileError(f"No upgrades found in {root}")
    return names[-1]


@dataclass(frozen=True)
class UpgradePaths:
    upgrade_dir: str
    environment: str = DEFAULT_ENVIRONMENT

    @classmethod
    def resolve(cls, environment: Optional[str] = None, root: Optional[str] = None,
                upgrade_name: Optional[str] = None) -> "UpgradePaths":
        root = root or default_upgrades_root()
        upgrade_name = upgrade_name or os.environ.get(ENV_UPGRADE_NAME) or latest_upgrade_name(root)
        environment = environment or os.environ.get(ENV_UPGRADE_ENVIRONMENT) or DEFAULT_ENVIRONMENT
        return cls(upgrade_dir=os.path.join(root, upgrade_name), environment=environment)

    @property
    def environment_dir(self) -> str:
        return os.path.join(self.upgrade_dir, self.environment)

    @property
    def common_data(self) -> str:
        return os.path.join(self.upgrade_dir, COMMON_DATA_FILE)

    @property
    def facet_cuts(self) -> str:
        return os.path.join(self.environment_dir, FACET_CUTS_FILE)

    @property
    def l2_upgrade(self) -> str:
        return os.path.join(self.environment_dir, L2_UPGRADE_FILE)

    @property
    def crypto(self) -> str:
        return os.path.join(self.environment_dir, CRYPTO_FILE)

    @property
    def post_upgrade_calldata(self) -> str:
        return os.path.join(self.environment_dir, POST_UPGRADE_CALLDATA_FILE)

    @property
    def transactions(self) -> str:
        return os.path.join(self.environment_dir, TRANSACTIONS_FILE)
