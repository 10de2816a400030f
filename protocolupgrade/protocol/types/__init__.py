# MIT License
# Copyright (c) 2025 Hashborn

from .common import (
    ZERO_ADDRESS,
    ZERO_HASH,
    EMPTY_BYTES,
    FacetAction,
    L2TxType,
    SubmitOperation,
    ProtocolError,
    MissingFileError,
    UnsupportedFeatureError,
    MalformedArtifactError,
    RpcError,
    TransactionFailedError,
)
from .upgrade import (
    L2CanonicalTransaction,
    VerifierParams,
    ProposedUpgrade,
    ForceDeployment,
    FacetCut,
    DiamondCutData,
    Call,
    GovernanceOperation,
)
from .bundle import TransactionBundle, RegistryUpgradeData, LegacyUpgradeData
