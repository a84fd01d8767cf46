"""Big-endian byte codec for the numeric protocol fields."""

from __future__ import annotations

from .errors import MalformedInput


def encode_int(value: int) -> bytes:
    if value < 0:
        raise ValueError("Only unsigned values can be encoded")
    length = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, "big")


def decode_int(data: bytes, max_length: int) -> int:
    """Decode an unsigned big-endian integer of at most ``max_length`` bytes."""

    if not data:
        raise MalformedInput("Empty numeric field")
    if len(data) > max_length:
        raise MalformedInput(f"Numeric field of {len(data)} bytes exceeds {max_length}")
    return int.from_bytes(data, "big")


def encode_hex(value: int) -> str:
    return encode_int(value).hex()


def decode_hex(text: str, max_length: int) -> int:
    try:
        data = bytes.fromhex(text)
    except (TypeError, ValueError) as exc:
        raise MalformedInput("Numeric field must be hex encoded") from exc
    return decode_int(data, max_length)


__all__ = ["decode_hex", "decode_int", "encode_hex", "encode_int"]
