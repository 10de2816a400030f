# MIT License
# Copyright (c) 2025 Hashborn

import os
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..protocol.config.params import (
    DEFAULT_DERIVATION_PATH, ENV_MNEMONIC, ENV_ZKSYNC_HOME, TEST_CONFIG_ETH_FILE,
)
from ..protocol.types.common import MalformedArtifactError, MissingFileError
from ..upgrade.gatherer import read_json_file

Account.enable_unaudited_hdwallet_features()


def read_test_config_mnemonic() -> str:
    """Mnemonic of the local test config shipped in the repository checkout."""
    home = os.environ.get(ENV_ZKSYNC_HOME)
    if not home:
        raise MissingFileError(
            f"No private key given, {ENV_MNEMONIC} is not set and {ENV_ZKSYNC_HOME} is unknown"
        )
    path = os.path.join(home, TEST_CONFIG_ETH_FILE)
    config = read_json_file(path)
    if not isinstance(config, dict) or "mnemonic" not in config:
        raise MalformedArtifactError(f"No mnemonic in {path}")
    return config["mnemonic"]


def load_wallet(private_key: Optional[str] = None, mnemonic: Optional[str] = None,
                derivation_path: str = DEFAULT_DERIVATION_PATH) -> LocalAccount:
    """
    Signing account for submitted transactions.

    A private key wins; otherwise the mnemonic (argument, then $MNEMONIC,
    then the test config) is derived at `derivation_path`.
    """
    if private_key:
        return Account.from_key(private_key)
    mnemonic = mnemonic or os.environ.get(ENV_MNEMONIC) or read_test_config_mnemonic()
    return Account.from_mnemonic(mnemonic, account_path=derivation_path)
