# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum, IntEnum

ZERO_ADDRESS = "0x" + "00" * 20
ZERO_HASH = "0x" + "00" * 32
EMPTY_BYTES = "0x"


class FacetAction(IntEnum):
    ADD = 0
    REPLACE = 1
    REMOVE = 2


class L2TxType(IntEnum):
    NOOP = 0            # L1 contracts skip the L2 upgrade when txType is 0
    PROTOCOL_UPGRADE = 254


class SubmitOperation(str, Enum):
    PROPOSE_UPGRADE_STM = "propose-upgrade-stm"
    EXECUTE_UPGRADE_STM = "execute-upgrade-stm"
    PROPOSE_UPGRADE = "propose-upgrade"
    EXECUTE_UPGRADE = "execute-upgrade"
    PROPOSE_UPGRADE_DIRECT = "propose-upgrade-direct"
    EXECUTE_UPGRADE_DIRECT = "execute-upgrade-direct"


class ProtocolError(Exception):
    pass

class MissingFileError(ProtocolError):
    pass

class UnsupportedFeatureError(ProtocolError):
    pass

class MalformedArtifactError(ProtocolError):
    pass

class RpcError(ProtocolError):
    pass

class TransactionFailedError(RpcError):
    pass
