"""
Tests for the TEE prover enclave descriptor.
"""
from protocolupgrade.enclave import tee_prover_descriptor
from protocolupgrade.enclave.descriptor import PASSTHROUGH_ENV


def test_descriptor_layout():
    descriptor = tee_prover_descriptor("tee-prover", "/nix/store/keypre", "/nix/store/prover/")

    assert descriptor.entrypoint == "/nix/store/keypre/bin/tee-key-preexec"
    assert descriptor.loader.argv == [
        "/nix/store/keypre/bin/tee-key-preexec",
        "/nix/store/prover/bin/zksync_tee_prover",
    ]
    assert descriptor.packages == ["/nix/store/keypre", "/nix/store/prover/"]
    assert descriptor.is_azure is True
    assert descriptor.loader.log_level == "error"


def test_sgx_sizing():
    sgx = tee_prover_descriptor("tee-prover", "/a", "/b").sgx
    assert sgx.edmm_enable is False
    assert sgx.enclave_size == "32G"
    assert sgx.max_threads == 128


def test_environment():
    descriptor = tee_prover_descriptor("tee-prover", "/a", "/b", is_azure=False, tag="v1")

    assert descriptor.passthrough_env == PASSTHROUGH_ENV
    assert descriptor.loader.env["RUST_BACKTRACE"] == "1"
    assert descriptor.loader.env["RUST_LOG"] == "warning,zksync_tee_prover=debug"
    assert descriptor.is_azure is False
    assert descriptor.tag == "v1"
