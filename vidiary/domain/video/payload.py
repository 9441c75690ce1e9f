"""Turning producer payloads into durable bytes.

Capture and import flows hand over transient resources (open files, buffers,
paths). Durability must never depend on those staying valid, so they are read
into ``bytes`` before anything reaches the store.
"""

from pathlib import Path
from typing import Any

from vidiary.domain.shared.error import SerializationError

BytesLike = bytes | bytearray | memoryview


def as_durable_bytes(value: Any) -> bytes:
    """Return ``value`` as immutable ``bytes`` or raise SerializationError.

    Only bytes-like values are accepted; text and arbitrary objects are refused
    rather than guessed at.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise SerializationError(
        f"Payload must be bytes-like, got {type(value).__name__}"
    )


def materialize_payload(source: Any) -> bytes:
    """Read a bytes-like object, binary file object or filesystem path into bytes."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return as_durable_bytes(source)

    if isinstance(source, Path):
        try:
            return source.read_bytes()
        except OSError as e:
            raise SerializationError(f"Could not read payload from {source}: {e}") from e

    if hasattr(source, "read"):
        try:
            if hasattr(source, "seek"):
                source.seek(0)
            data = source.read()
        except (OSError, ValueError) as e:
            # ValueError: I/O operation on closed file
            raise SerializationError(f"Could not read payload stream: {e}") from e
        return as_durable_bytes(data)

    raise SerializationError(f"Unsupported payload source: {type(source).__name__}")
