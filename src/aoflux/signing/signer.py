"""Wallet-backed signer for AO data items.

A :class:`Signer` wraps an Arweave RSA key (a JWK wallet) and is
immutable once built, so one instance can be shared by every
concurrent tool invocation.
"""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from aoflux.core.errors import SigningError
from aoflux.signing.dataitem import (
    ANCHOR_LENGTH,
    OWNER_LENGTH,
    DataItem,
    b64url_decode,
    b64url_encode,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from aoflux.config.schema import WalletConfig
    from aoflux.network.models import Tag

logger = logging.getLogger(__name__)

_KEY_SIZE = OWNER_LENGTH * 8
_PUBLIC_EXPONENT = 65537
_PSS = padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH)


def _int_to_b64(n: int) -> str:
    return b64url_encode(n.to_bytes((n.bit_length() + 7) // 8, "big"))


def _b64_to_int(text: str) -> int:
    return int.from_bytes(b64url_decode(text), "big")


class Signer:
    """Signs ANS-104 data items with an RSA-4096 Arweave key."""

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        if private_key.key_size != _KEY_SIZE:
            msg = f"Arweave wallets use {_KEY_SIZE}-bit keys, got {private_key.key_size}"
            raise SigningError(msg)
        self._private_key = private_key
        self._owner = private_key.public_key().public_numbers().n.to_bytes(
            OWNER_LENGTH, "big"
        )

    # -- Construction ----------------------------------------------------------

    @classmethod
    def generate(cls) -> Signer:
        """Create a signer with a fresh random wallet."""
        key = rsa.generate_private_key(public_exponent=_PUBLIC_EXPONENT, key_size=_KEY_SIZE)
        return cls(key)

    @classmethod
    def from_jwk(cls, jwk: dict[str, Any]) -> Signer:
        """Load a signer from an Arweave JWK dict."""
        try:
            public = rsa.RSAPublicNumbers(e=_b64_to_int(jwk["e"]), n=_b64_to_int(jwk["n"]))
            numbers = rsa.RSAPrivateNumbers(
                p=_b64_to_int(jwk["p"]),
                q=_b64_to_int(jwk["q"]),
                d=_b64_to_int(jwk["d"]),
                dmp1=_b64_to_int(jwk["dp"]),
                dmq1=_b64_to_int(jwk["dq"]),
                iqmp=_b64_to_int(jwk["qi"]),
                public_numbers=public,
            )
            key = numbers.private_key()
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Malformed JWK wallet: {e}"
            raise SigningError(msg) from e
        return cls(key)

    @classmethod
    def from_file(cls, path: str | Path) -> Signer:
        """Load a signer from a JWK wallet file."""
        p = Path(path).expanduser()
        try:
            jwk = json.loads(p.read_text(encoding="utf-8"))
        except OSError as e:
            msg = f"Cannot read wallet file {p}: {e}"
            raise SigningError(msg) from e
        except json.JSONDecodeError as e:
            msg = f"Wallet file {p} is not valid JSON: {e}"
            raise SigningError(msg) from e
        if not isinstance(jwk, dict):
            msg = f"Wallet file {p} does not contain a JWK object"
            raise SigningError(msg)
        return cls.from_jwk(jwk)

    def to_jwk(self) -> dict[str, str]:
        """Export the wallet in Arweave JWK form."""
        numbers = self._private_key.private_numbers()
        return {
            "kty": "RSA",
            "e": _int_to_b64(numbers.public_numbers.e),
            "n": _int_to_b64(numbers.public_numbers.n),
            "d": _int_to_b64(numbers.d),
            "p": _int_to_b64(numbers.p),
            "q": _int_to_b64(numbers.q),
            "dp": _int_to_b64(numbers.dmp1),
            "dq": _int_to_b64(numbers.dmq1),
            "qi": _int_to_b64(numbers.iqmp),
        }

    # -- Identity --------------------------------------------------------------

    @property
    def owner(self) -> bytes:
        """Raw public modulus, as carried in every data item."""
        return self._owner

    @property
    def address(self) -> str:
        """Wallet address: base64url(sha256(owner))."""
        return b64url_encode(hashlib.sha256(self._owner).digest())

    # -- Signing ---------------------------------------------------------------

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message, _PSS, hashes.SHA256())

    def verify(self, message: bytes, signature: bytes) -> bool:
        try:
            self._private_key.public_key().verify(signature, message, _PSS, hashes.SHA256())
        except InvalidSignature:
            return False
        return True

    def create_data_item(
        self,
        data: str | bytes,
        tags: Sequence[Tag] = (),
        target: str | None = None,
    ) -> DataItem:
        """Build and sign a data item.

        ``target`` is a base64url process id. A random anchor makes every
        item unique, so resending identical data yields a new message id.
        """
        raw_target = b""
        if target:
            try:
                raw_target = b64url_decode(target)
            except ValueError as e:
                msg = f"Target is not base64url: {target!r}"
                raise SigningError(msg) from e
        unsigned = DataItem(
            owner=self._owner,
            data=data.encode("utf-8") if isinstance(data, str) else data,
            tags=tuple(tags),
            target=raw_target,
            anchor=secrets.token_hex(ANCHOR_LENGTH // 2).encode("ascii"),
        )
        signature = self.sign(unsigned.signature_data)
        return DataItem(
            owner=unsigned.owner,
            data=unsigned.data,
            tags=unsigned.tags,
            target=unsigned.target,
            anchor=unsigned.anchor,
            signature=signature,
        )


def load_signer(config: WalletConfig) -> Signer:
    """Load the configured wallet, or generate an ephemeral one."""
    if config.path:
        signer = Signer.from_file(config.path)
        logger.info("Loaded wallet %s from %s", signer.address, config.path)
        return signer
    signer = Signer.generate()
    logger.warning(
        "No wallet configured; generated ephemeral wallet %s", signer.address
    )
    return signer
