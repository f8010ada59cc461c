"""Wallet signing and ANS-104 data items."""

from aoflux.signing.dataitem import DataItem, deep_hash, serialize_tags
from aoflux.signing.signer import Signer, load_signer

__all__ = [
    "DataItem",
    "Signer",
    "deep_hash",
    "load_signer",
    "serialize_tags",
]
