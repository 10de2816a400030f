# MIT License
# Copyright (c) 2025 Hashborn

"""
TEE Prover Enclave Descriptor

Static description of the SGX image that runs the TEE prover: the key
provisioning helper is the entrypoint and execs the prover binary.
Consumed by the external enclave build tooling.
"""

from typing import Dict, List, Union

from pydantic import BaseModel, Field

KEY_PREEXEC_BINARY = "/bin/tee-key-preexec"
PROVER_BINARY = "/bin/zksync_tee_prover"

PASSTHROUGH_ENV = [
    "TEE_API_URL",
    "API_PROMETHEUS_LISTENER_PORT",
    "API_PROMETHEUS_PUSHGATEWAY_URL",
    "API_PROMETHEUS_PUSH_INTERVAL_MS",
]

# debug
FIXED_ENV = {
    "RUST_BACKTRACE": "1",
    "RUST_LOG": "warning,zksync_tee_prover=debug",
}


class SgxSizing(BaseModel):
    edmm_enable: bool = False
    enclave_size: str = "32G"
    max_threads: int = 128


class LoaderConfig(BaseModel):
    argv: List[str]
    log_level: str = "error"
    env: Dict[str, Union[str, Dict[str, bool]]] = Field(default_factory=dict)


class EnclaveDescriptor(BaseModel):
    name: str
    entrypoint: str
    packages: List[str]
    is_azure: bool = True
    tag: Union[str, None] = None
    loader: LoaderConfig
    sgx: SgxSizing = Field(default_factory=SgxSizing)

    @property
    def passthrough_env(self) -> List[str]:
        return [key for key, value in self.loader.env.items() if isinstance(value, dict) and value.get("passthrough")]


def tee_prover_descriptor(container_name: str, key_preexec_prefix: str, prover_prefix: str,
                          is_azure: bool = True, tag: Union[str, None] = None) -> EnclaveDescriptor:
    """
    Args:
        container_name: Name of the resulting image
        key_preexec_prefix: Install prefix of the key provisioning helper
        prover_prefix: Install prefix of the prover
    """
    entrypoint = key_preexec_prefix.rstrip("/") + KEY_PREEXEC_BINARY
    env: Dict[str, Union[str, Dict[str, bool]]] = {name: {"passthrough": True} for name in PASSTHROUGH_ENV}
    env.update(FIXED_ENV)
    return EnclaveDescriptor(
        name=container_name,
        entrypoint=entrypoint,
        packages=[key_preexec_prefix, prover_prefix],
        is_azure=is_azure,
        tag=tag,
        loader=LoaderConfig(
            argv=[entrypoint, prover_prefix.rstrip("/") + PROVER_BINARY],
            env=env,
        ),
    )
