# MIT License
# Copyright (c) 2025 Hashborn

# Transactions
DEFAULT_GAS_LIMIT = 10_000_000
DEFAULT_GOVERNANCE_DELAY = 0
RECEIPT_POLL_INTERVAL_SEC = 2.0
RECEIPT_TIMEOUT_SEC = 600
RPC_TIMEOUT_SEC = 30

# Wallet
DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/1"
TEST_CONFIG_ETH_FILE = "etc/test_config/constant/eth.json"

# Network
DEFAULT_L1_RPC = "http://127.0.0.1:8545"

# Environment variables used as fallbacks for absent flags
ENV_L1_RPC = "ETH_CLIENT_WEB3_URL"
ENV_DIAMOND_PROXY = "CONTRACTS_DIAMOND_PROXY_ADDR"
ENV_DEFAULT_UPGRADE = "CONTRACTS_DEFAULT_UPGRADE_ADDR"
ENV_STM = "CONTRACTS_STATE_TRANSITION_PROXY_ADDR"
ENV_CHAIN_ID = "CHAIN_ETH_ZKSYNC_NETWORK_ID"
ENV_MNEMONIC = "MNEMONIC"
ENV_ZKSYNC_HOME = "ZKSYNC_HOME"
ENV_UPGRADE_ROOT = "UPGRADE_ROOT"
ENV_UPGRADE_NAME = "UPGRADE_NAME"
ENV_UPGRADE_ENVIRONMENT = "UPGRADE_ENVIRONMENT"

# Upgrade directory layout
DEFAULT_ENVIRONMENT = "localhost"
UPGRADES_SUBDIR = "etc/upgrades"
COMMON_DATA_FILE = "common.json"
FACET_CUTS_FILE = "facetCuts.json"
L2_UPGRADE_FILE = "l2Upgrade.json"
CRYPTO_FILE = "crypto.json"
POST_UPGRADE_CALLDATA_FILE = "postUpgradeCalldata.json"
TRANSACTIONS_FILE = "transactions.json"
