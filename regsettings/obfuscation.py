# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/obfuscation.py
"""
Reversible, non-cryptographic byte scrambling for binary registry values.

This only keeps values from being readable at a glance in regedit. Anyone with
this module can reverse it.

Layout of an obfuscated blob:

    +-------+------+-----------------+---------------------------+
    | magic | salt | crc32(plain) LE | payload ^ keystream(salt) |
    |  2 B  | 1 B  |       4 B       |          n bytes          |
    +-------+------+-----------------+---------------------------+
"""
from __future__ import annotations

import secrets
import struct
import zlib
from typing import Optional, Union

from .core.exceptions import ObfuscationError

MAGIC = b"\x5a\xa5"
HEADER_SIZE = len(MAGIC) + 1 + 4

_KEY = b"regsettings:obfuscation:v1"

BytesLike = Union[bytes, bytearray, memoryview]


def _xor(data: bytes, salt: int) -> bytes:
    key_len = len(_KEY)
    return bytes(b ^ _KEY[(i + salt) % key_len] ^ salt for i, b in enumerate(data))


def obfuscate(data: BytesLike, *, salt: Optional[int] = None) -> bytes:
    """Scramble `data`. `salt` (0..255) is random unless given."""
    plain = bytes(data)
    if salt is None:
        salt = secrets.randbelow(256)
    if not 0 <= salt <= 255:
        raise ValueError(f"salt must fit in one byte, got {salt}")
    header = MAGIC + bytes([salt]) + struct.pack("<I", zlib.crc32(plain) & 0xFFFFFFFF)
    return header + _xor(plain, salt)


def deobfuscate(data: BytesLike) -> bytes:
    """
    Reverse `obfuscate`.

    Raises ObfuscationError for anything that was not produced by `obfuscate`
    or was modified afterwards.
    """
    blob = bytes(data)
    if len(blob) < HEADER_SIZE:
        raise ObfuscationError(msg=f"obfuscated value too short ({len(blob)} bytes)")
    if blob[: len(MAGIC)] != MAGIC:
        raise ObfuscationError(msg="obfuscated value has no valid header")

    salt = blob[len(MAGIC)]
    (expected_crc,) = struct.unpack("<I", blob[len(MAGIC) + 1 : HEADER_SIZE])
    plain = _xor(blob[HEADER_SIZE:], salt)
    if zlib.crc32(plain) & 0xFFFFFFFF != expected_crc:
        raise ObfuscationError(msg="obfuscated value failed checksum", context={"bytes": len(blob)})
    return plain


def is_obfuscated(data: BytesLike) -> bool:
    try:
        deobfuscate(data)
    except ObfuscationError:
        return False
    return True
