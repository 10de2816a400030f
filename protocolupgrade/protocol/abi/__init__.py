# MIT License
# Copyright (c) 2025 Hashborn

from .contracts import (
    ContractFunction,
    ForceDeployUpgrader,
    ComplexUpgrader,
    DefaultUpgrade,
    StateTransitionManager,
    AdminFacet,
    Governance,
    LegacyDiamondProxy,
)

__all__ = [
    "ContractFunction",
    "ForceDeployUpgrader",
    "ComplexUpgrader",
    "DefaultUpgrade",
    "StateTransitionManager",
    "AdminFacet",
    "Governance",
    "LegacyDiamondProxy",
]
