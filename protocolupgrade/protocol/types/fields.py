# MIT License
# Copyright (c) 2025 Hashborn

"""
Field coercion shared by the upgrade records.

Upgrade side-files are written by several tools, so numbers arrive as ints,
decimal strings or 0x-hex strings, and byte strings arrive with or without
checksummed casing. Everything is normalized on the way in.
"""

from typing import Annotated, Any

from eth_utils import decode_hex, to_checksum_address
from pydantic import BaseModel, BeforeValidator, ConfigDict


def camel_alias(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_uint(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an unsigned integer, got a boolean")
    if isinstance(value, str):
        text = value.strip()
        value = int(text, 16) if text.lower().startswith("0x") else int(text)
    if not isinstance(value, int):
        raise ValueError(f"expected an unsigned integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"expected an unsigned integer, got {value}")
    return int(value)


def to_hex_bytes(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if not isinstance(value, str) or not value.lower().startswith("0x"):
        raise ValueError(f"expected a 0x-prefixed hex string, got {value!r}")
    try:
        return "0x" + decode_hex(value).hex()
    except ValueError as e:
        raise ValueError(f"invalid hex string {value!r}: {e}")


def _fixed_bytes(size: int):
    def validate(value: Any) -> str:
        normalized = to_hex_bytes(value)
        if len(normalized) != 2 + 2 * size:
            raise ValueError(f"expected {size} bytes, got {(len(normalized) - 2) // 2}")
        return normalized
    return validate


def to_address(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        value = "0x" + bytes(value).hex()
    if not isinstance(value, str):
        raise ValueError(f"expected an address string, got {type(value).__name__}")
    return to_checksum_address(value)


def hex_to_bytes(value: str) -> bytes:
    return decode_hex(value)


Uint = Annotated[int, BeforeValidator(to_uint)]
HexBytes = Annotated[str, BeforeValidator(to_hex_bytes)]
Bytes32 = Annotated[str, BeforeValidator(_fixed_bytes(32))]
Bytes4 = Annotated[str, BeforeValidator(_fixed_bytes(4))]
Address = Annotated[str, BeforeValidator(to_address)]


class CamelModel(BaseModel):
    """Base for records stored on disk with camelCase keys."""
    model_config = ConfigDict(alias_generator=camel_alias, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
