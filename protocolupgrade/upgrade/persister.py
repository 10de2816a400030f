# MIT License
# Copyright (c) 2025 Hashborn

"""
Transaction bundle persistence.

The bundle file is rewritten wholesale on every build: no merge, no backup.
"""

import json
import logging
import os

from pydantic import ValidationError

from ..protocol.types.bundle import TransactionBundle
from ..protocol.types.common import MalformedArtifactError
from .gatherer import read_json_file

logger = logging.getLogger(__name__)


def write_bundle(bundle: TransactionBundle, path: str):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(bundle.to_json_dict(), f, indent=2)
    logger.info(f"Wrote upgrade transactions to {path}")


def read_bundle(path: str) -> TransactionBundle:
    """
    Load a bundle written by `write_bundle`.

    Raises:
        MissingFileError: no bundle at path (run build-default first)
        MalformedArtifactError: the file is not a valid bundle
    """
    raw = read_json_file(path)
    try:
        return TransactionBundle.model_validate(raw)
    except ValidationError as e:
        raise MalformedArtifactError(f"Invalid transaction bundle {path}: {e}")
