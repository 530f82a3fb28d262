"""
Response payload codec.

The verification script answers with a single unsigned 256-bit integer,
ABI-encoded as 32 big-endian bytes.
"""

UINT256_SIZE = 32
UINT256_MAX = 2**256 - 1

# Outcome the verification script returns for an ACTIVE subject.
SUCCESS_SENTINEL = 1


def encode_uint256(value: int) -> bytes:
    """Encode value as 32 big-endian bytes."""
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"value out of uint256 range: {value}")
    return value.to_bytes(UINT256_SIZE, "big")


def decode_uint256(payload: bytes) -> int:
    """
    Decode a 32-byte big-endian payload.

    Raises:
        ValueError: payload is not exactly 32 bytes
    """
    if len(payload) != UINT256_SIZE:
        raise ValueError(f"expected {UINT256_SIZE} bytes, got {len(payload)}")
    return int.from_bytes(payload, "big")
