"""Read selected files and encode them for transport to the oracle."""

import asyncio
import base64
from pathlib import Path

from .errors import ReadError
from .models import SourceHandle


def encode_bytes(content: bytes) -> str:
    """Convert raw bytes to base64 text."""
    return base64.b64encode(content).decode("utf-8")


def decode_content(encoded: str) -> bytes:
    """Convert base64 text back to raw bytes."""
    return base64.b64decode(encoded.encode("ascii"))


async def encode(handle: SourceHandle) -> str:
    """Read the full content of ``handle`` and return it base64 encoded.

    Single attempt, no retry.

    Raises:
        ReadError: If the handle has no content source or the file cannot be read.
    """
    if handle.data is not None:
        return encode_bytes(handle.data)
    if not handle.path:
        raise ReadError(f"No content available for {handle.name}")
    try:
        content = await asyncio.to_thread(Path(handle.path).read_bytes)
    except OSError as e:
        raise ReadError(f"Could not read {handle.name}: {e}") from e
    return encode_bytes(content)
