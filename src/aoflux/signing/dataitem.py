"""ANS-104 data items: the signed envelope every AO message travels in.

Binary layout (all integers little-endian)::

    signature type   2 bytes   (1 = Arweave RSA-PSS)
    signature        512 bytes
    owner            512 bytes (RSA modulus)
    target           1 flag byte + 32 bytes if present
    anchor           1 flag byte + 32 bytes if present
    tag count        8 bytes
    tag byte length  8 bytes
    tags             Avro-encoded array of {name: bytes, value: bytes}
    data             rest of the item

The signature covers the SHA-384 deep hash of the item's fields.
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aoflux.core.errors import SigningError
from aoflux.network.models import Tag

if TYPE_CHECKING:
    from collections.abc import Sequence

SIGNATURE_TYPE_ARWEAVE = 1
SIGNATURE_LENGTH = 512
OWNER_LENGTH = 512
TARGET_LENGTH = 32
ANCHOR_LENGTH = 32


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


# ─── Deep hash ────────────────────────────────────────────────


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()


def deep_hash(value: bytes | Sequence[bytes]) -> bytes:
    """Arweave deep hash over a blob or a (nested) list of blobs."""
    if isinstance(value, (bytes, bytearray)):
        tag = _sha384(b"blob" + str(len(value)).encode())
        return _sha384(tag + _sha384(bytes(value)))
    acc = _sha384(b"list" + str(len(value)).encode())
    for chunk in value:
        acc = _sha384(acc + deep_hash(chunk))
    return acc


# ─── Avro tag encoding ────────────────────────────────────────


def _encode_long(n: int) -> bytes:
    zigzag = (n << 1) ^ (n >> 63)
    out = bytearray()
    while zigzag & ~0x7F:
        out.append((zigzag & 0x7F) | 0x80)
        zigzag >>= 7
    out.append(zigzag)
    return bytes(out)


def _encode_bytes(data: bytes) -> bytes:
    return _encode_long(len(data)) + data


def serialize_tags(tags: Sequence[Tag]) -> bytes:
    """Avro-encode tags in order. No tags encodes to no bytes."""
    if not tags:
        return b""
    body = bytearray(_encode_long(len(tags)))
    for tag in tags:
        body += _encode_bytes(tag.name.encode("utf-8"))
        body += _encode_bytes(tag.value.encode("utf-8"))
    body += _encode_long(0)
    return bytes(body)


# ─── Data item ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DataItem:
    """An unsigned or signed ANS-104 data item."""

    owner: bytes
    data: bytes
    tags: tuple[Tag, ...] = ()
    target: bytes = b""
    anchor: bytes = b""
    signature: bytes = b""

    def __post_init__(self) -> None:
        if len(self.owner) != OWNER_LENGTH:
            msg = f"Owner must be {OWNER_LENGTH} bytes, got {len(self.owner)}"
            raise SigningError(msg)
        if self.target and len(self.target) != TARGET_LENGTH:
            msg = f"Target must be {TARGET_LENGTH} bytes, got {len(self.target)}"
            raise SigningError(msg)
        if self.anchor and len(self.anchor) != ANCHOR_LENGTH:
            msg = f"Anchor must be {ANCHOR_LENGTH} bytes, got {len(self.anchor)}"
            raise SigningError(msg)

    @property
    def signature_data(self) -> bytes:
        """The digest the signer signs."""
        return deep_hash(
            [
                b"dataitem",
                b"1",
                str(SIGNATURE_TYPE_ARWEAVE).encode(),
                self.owner,
                self.target,
                self.anchor,
                serialize_tags(self.tags),
                self.data,
            ]
        )

    @property
    def id(self) -> str:
        if not self.signature:
            msg = "Data item is not signed"
            raise SigningError(msg)
        return b64url_encode(hashlib.sha256(self.signature).digest())

    def to_bytes(self) -> bytes:
        if len(self.signature) != SIGNATURE_LENGTH:
            msg = "Data item is not signed"
            raise SigningError(msg)
        tag_bytes = serialize_tags(self.tags)
        out = bytearray(SIGNATURE_TYPE_ARWEAVE.to_bytes(2, "little"))
        out += self.signature
        out += self.owner
        out += b"\x01" + self.target if self.target else b"\x00"
        out += b"\x01" + self.anchor if self.anchor else b"\x00"
        out += len(self.tags).to_bytes(8, "little")
        out += len(tag_bytes).to_bytes(8, "little")
        out += tag_bytes
        out += self.data
        return bytes(out)

    @classmethod
    def from_bytes(cls, raw: bytes) -> DataItem:
        """Parse a serialized data item.

        Raises:
            SigningError: If the bytes are not a well-formed Arweave data item.
        """
        try:
            sig_type = int.from_bytes(raw[0:2], "little")
            if sig_type != SIGNATURE_TYPE_ARWEAVE:
                msg = f"Unsupported signature type {sig_type}"
                raise SigningError(msg)
            pos = 2
            signature = raw[pos : pos + SIGNATURE_LENGTH]
            pos += SIGNATURE_LENGTH
            owner = raw[pos : pos + OWNER_LENGTH]
            pos += OWNER_LENGTH
            target, pos = _read_optional(raw, pos, TARGET_LENGTH)
            anchor, pos = _read_optional(raw, pos, ANCHOR_LENGTH)
            tag_count = int.from_bytes(raw[pos : pos + 8], "little")
            tag_len = int.from_bytes(raw[pos + 8 : pos + 16], "little")
            pos += 16
            pairs = _deserialize_tags(raw[pos : pos + tag_len])
            pos += tag_len
        except (IndexError, UnicodeDecodeError) as e:
            msg = "Truncated or malformed data item"
            raise SigningError(msg) from e
        if len(pairs) != tag_count:
            msg = f"Data item declares {tag_count} tags but carries {len(pairs)}"
            raise SigningError(msg)
        return cls(
            owner=owner,
            data=raw[pos:],
            tags=tuple(Tag(name, value) for name, value in pairs),
            target=target,
            anchor=anchor,
            signature=signature,
        )


def _read_optional(raw: bytes, pos: int, length: int) -> tuple[bytes, int]:
    present = raw[pos]
    pos += 1
    if not present:
        return b"", pos
    value = raw[pos : pos + length]
    if len(value) != length:
        raise IndexError(pos)
    return value, pos + length


def _decode_long(raw: bytes, pos: int) -> tuple[int, int]:
    shift = 0
    zigzag = 0
    while True:
        byte = raw[pos]
        pos += 1
        zigzag |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
    return (zigzag >> 1) ^ -(zigzag & 1), pos


def _decode_str(raw: bytes, pos: int) -> tuple[str, int]:
    length, pos = _decode_long(raw, pos)
    end = pos + length
    if end > len(raw):
        raise IndexError(end)
    return raw[pos:end].decode("utf-8"), end


def _deserialize_tags(raw: bytes) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    pos = 0
    while pos < len(raw):
        count, pos = _decode_long(raw, pos)
        if count == 0:
            break
        if count < 0:
            # Negative block counts are followed by the block's byte size.
            count = -count
            _, pos = _decode_long(raw, pos)
        for _ in range(count):
            name, pos = _decode_str(raw, pos)
            value, pos = _decode_str(raw, pos)
            pairs.append((name, value))
    return pairs
