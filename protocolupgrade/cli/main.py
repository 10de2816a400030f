# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import json
import logging
import sys

from .wallet import load_wallet
from ..enclave import tee_prover_descriptor
from ..protocol.types.common import ProtocolError, SubmitOperation
from ..rpc.client import JsonRpcClient
from ..upgrade.builder import build_default_upgrade
from ..upgrade.options import BuildOptions, SubmitOptions
from ..upgrade.paths import UpgradePaths
from ..upgrade.submitter import UpgradeSubmitter

logger = logging.getLogger(__name__)


def fail(message):
    print(f"Error: {message}")
    sys.exit(1)


# --- Build ---
def cmd_build_default(args):
    options = BuildOptions.from_args(args)
    paths = UpgradePaths.resolve(options.environment)
    bundle = build_default_upgrade(paths, options)
    print(f"Upgrade transactions for protocol version {bundle.protocol_version} written to {paths.transactions}")


# --- Submit ---
def make_submitter(options: SubmitOptions, with_wallet: bool = True) -> UpgradeSubmitter:
    client = JsonRpcClient(options.l1rpc)
    wallet = load_wallet(options.private_key) if with_wallet else None
    return UpgradeSubmitter(client, wallet)


def cmd_submit(args):
    options = SubmitOptions.from_args(args)
    operation = SubmitOperation(args.subcommand)
    paths = UpgradePaths.resolve(options.environment)
    submitter = make_submitter(options)
    receipt = submitter.submit(
        paths.transactions,
        operation,
        new_governance=options.new_governance,
        zksync_address=options.zksync_address,
        gas_price=options.gas_price,
        nonce=options.nonce,
    )
    print(f"Success! TxHash: {receipt.get('transactionHash')}")


def cmd_cancel_upgrade(args):
    options = SubmitOptions.from_args(args)
    paths = UpgradePaths.resolve(options.environment)
    submitter = make_submitter(options, with_wallet=options.execute)
    result = submitter.cancel_upgrade(
        paths.transactions,
        new_governance=options.new_governance,
        zksync_address=options.zksync_address,
        execute=options.execute,
        gas_price=options.gas_price,
        nonce=options.nonce,
    )
    print(f"Cancel upgrade operation with id: {result.operation_id}")
    if result.receipt is None:
        print(f"Cancel upgrade calldata: {result.calldata}")
    else:
        print("Operation canceled")


# --- Enclave ---
def cmd_enclave_descriptor(args):
    descriptor = tee_prover_descriptor(
        args.name,
        args.key_preexec_prefix,
        args.prover_prefix,
        is_azure=not args.no_azure,
        tag=args.tag,
    )
    print(json.dumps(descriptor.model_dump(), indent=2))


def add_submit_args(p, with_zksync_address=True):
    p.add_argument("--environment", help="Upgrade environment (default: localhost)")
    p.add_argument("--private-key", help="Hex private key (default: mnemonic wallet)")
    if with_zksync_address:
        p.add_argument("--zksync-address", help="Diamond proxy address")
    p.add_argument("--gas-price", type=int, help="Gas price in wei (default: fetched)")
    p.add_argument("--nonce", type=int, help="Nonce (default: fetched)")
    p.add_argument("--l1rpc", help="L1 JSON-RPC URL")
    p.add_argument("--new-governance", help="Governance contract address")


def build_parser():
    parser = argparse.ArgumentParser(prog="protocol-upgrade", description="Protocol upgrade tool")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    # transactions
    p_tx = subparsers.add_parser("transactions", help="Prepare the transactions and their calldata for the upgrade")
    sp_tx = p_tx.add_subparsers(dest="subcommand")

    pt_build = sp_tx.add_parser("build-default", help="Build the default upgrade transactions")
    pt_build.add_argument("--upgrade-timestamp", required=True, type=int, help="Upgrade activation timestamp")
    pt_build.add_argument("--upgrade-address", help="DefaultUpgrade contract address")
    pt_build.add_argument("--environment", help="Upgrade environment (default: localhost)")
    pt_build.add_argument("--new-allow-list", help="Allow list contract address")
    pt_build.add_argument("--l2-upgrader-address", help="L2 force deploy upgrader address")
    pt_build.add_argument("--diamond-upgrade-proposal-id", type=int, help="Legacy diamond proposal id")
    pt_build.add_argument("--l1rpc", help="L1 JSON-RPC URL")
    pt_build.add_argument("--zksync-address", help="Diamond proxy address")
    pt_build.add_argument("--stm-address", help="State transition manager address")
    pt_build.add_argument("--chain-id", type=int, help="Chain id for the direct STM upgrade")
    pt_build.add_argument("--use-new-governance", action="store_true", help="Route through the governance contract")
    pt_build.add_argument("--post-upgrade-calldata", action="store_true", help="Include postUpgradeCalldata.json")
    pt_build.add_argument("--old-protocol-version", type=int, help="Protocol version being upgraded from")
    pt_build.add_argument("--old-protocol-version-deadline", type=int, help="Deadline of the old protocol version")
    pt_build.add_argument("--new-protocol-version", type=int, help="Protocol version being upgraded to")

    add_submit_args(sp_tx.add_parser("propose-upgrade-stm", help="Schedule the STM version upgrade"), False)
    add_submit_args(sp_tx.add_parser("execute-upgrade-stm", help="Execute the STM version upgrade"), False)
    add_submit_args(sp_tx.add_parser("propose-upgrade", help="Schedule the diamond proxy upgrade"))
    add_submit_args(sp_tx.add_parser("execute-upgrade", help="Execute the diamond proxy upgrade"))
    add_submit_args(sp_tx.add_parser("propose-upgrade-direct", help="Schedule the direct STM upgrade"))
    add_submit_args(sp_tx.add_parser("execute-upgrade-direct", help="Execute the direct STM upgrade"))

    pt_cancel = sp_tx.add_parser("cancel-upgrade", help="Cancel a scheduled upgrade")
    add_submit_args(pt_cancel)
    pt_cancel.add_argument("--execute", action="store_true", help="Send the cancel transaction (default: print calldata)")

    # enclave
    p_enclave = subparsers.add_parser("enclave", help="TEE prover enclave image")
    sp_enclave = p_enclave.add_subparsers(dest="subcommand")

    pe_desc = sp_enclave.add_parser("descriptor", help="Print the enclave image descriptor")
    pe_desc.add_argument("--name", default="tee-prover", help="Container name")
    pe_desc.add_argument("--key-preexec-prefix", required=True, help="Install prefix of tee-key-preexec")
    pe_desc.add_argument("--prover-prefix", required=True, help="Install prefix of the prover")
    pe_desc.add_argument("--tag", help="Image tag")
    pe_desc.add_argument("--no-azure", action="store_true", help="Build for non-Azure SGX hosts")

    return parser, p_tx, p_enclave


def main(argv=None):
    parser, p_tx, p_enclave = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        if args.command == "transactions":
            if args.subcommand == "build-default": cmd_build_default(args)
            elif args.subcommand == "cancel-upgrade": cmd_cancel_upgrade(args)
            elif args.subcommand in {op.value for op in SubmitOperation}: cmd_submit(args)
            else: p_tx.print_help()

        elif args.command == "enclave":
            if args.subcommand == "descriptor": cmd_enclave_descriptor(args)
            else: p_enclave.print_help()

        else:
            parser.print_help()
    except (ProtocolError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        fail(e)


if __name__ == "__main__":
    main()
