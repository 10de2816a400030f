# MIT License
# Copyright (c) 2025 Hashborn

from .descriptor import EnclaveDescriptor, tee_prover_descriptor

__all__ = ["EnclaveDescriptor", "tee_prover_descriptor"]
