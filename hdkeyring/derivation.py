#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Deterministic derivation of key pairs from a seed.

The root extended key is obtained applying a derivation path
(e.g. "m/44'/0'/0'/0") to the BIP32 master key of the seed;
account key pairs are then derived as children of that root:

    root = derive_root(seed, "m/44'/0'/0'/0", "mainnet")
    key_pair = derive_child(root, 1)

Both functions are pure: the same (seed, path) always yields
the same root, the same (root, index) always yields the same key pair.
The actual child key derivation math is delegated to btclib.bip32.
"""

from dataclasses import dataclass, field
from typing import Optional

from btclib.bip32 import (
    BIP32KeyData,
    derive,
    indexes_from_bip32_path,
    rootxprv_from_seed,
    xpub_from_xprv,
)
from btclib.b58 import wif_from_prv_key
from btclib.exceptions import BTClibValueError
from btclib.network import NETWORKS, network_from_xkeyversion
from btclib.utils import bytes_from_octets

from hdkeyring.address import PubKey
from hdkeyring.exceptions import DerivationError, InvalidOperationError

HARDENED = 0x80000000
MAX_INDEX = 0xFFFFFFFF


@dataclass(frozen=True)
class KeyPair:
    """Public key, with its private key when available.

    The private key is an integer in [1, n-1];
    it is None for key pairs derived from a public-only root.
    """

    pub_key: PubKey
    prv_key: Optional[int] = field(default=None, repr=False)
    network: str = "mainnet"

    @property
    def has_prv_key(self) -> bool:
        return self.prv_key is not None

    def wif(self) -> str:
        "Return the (compressed) WIF encoding of the private key."
        if self.prv_key is None:
            raise InvalidOperationError("public-only key pair")
        return wif_from_prv_key(self.prv_key, self.network, compressed=True)


def validate_path(path: str) -> str:
    "Return the stripped derivation path, if valid."

    if not isinstance(path, str) or not path.strip():
        raise DerivationError(f"invalid derivation path: {path!r}")
    try:
        indexes_from_bip32_path(path)
    except (BTClibValueError, ValueError) as e:
        raise DerivationError(f"invalid derivation path: {path!r}") from e
    return path.strip()


def _validate_index(index: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise DerivationError(f"invalid child index: {index!r}")
    if not 0 <= index <= MAX_INDEX:
        raise DerivationError(f"invalid child index: {index}")
    return index


def derive_root(seed: bytes, path: str, network: str = "mainnet") -> BIP32KeyData:
    "Return the extended key obtained applying the path to the seed."

    path = validate_path(path)
    try:
        seed = bytes_from_octets(seed)
        mxprv = rootxprv_from_seed(seed, NETWORKS[network].bip32_prv)
        return BIP32KeyData.b58decode(derive(mxprv, path))
    except BTClibValueError as e:
        raise DerivationError(str(e)) from e


def key_pair_from_xkey(xkey: BIP32KeyData, network: Optional[str] = None) -> KeyPair:
    "Return the key pair of an extended (private or public) key."

    if network is None:
        network = network_from_xkeyversion(xkey.version)
    if not xkey.is_private:
        return KeyPair(PubKey(xkey.key), None, network)
    prv_key = int.from_bytes(xkey.key[1:], byteorder="big", signed=False)
    xpub = BIP32KeyData.b58decode(xpub_from_xprv(xkey))
    return KeyPair(PubKey(xpub.key), prv_key, network)


def derive_child(
    root: BIP32KeyData, index: int, network: Optional[str] = None
) -> KeyPair:
    """Return the key pair derived at index from the root.

    If network is None, it is inferred from the root version:
    networks sharing the same version (e.g. testnet and regtest)
    cannot be told apart.

    Indexes in [0, 2**31) use normal derivation,
    indexes in [2**31, 2**32) hardened derivation:
    the latter is not available for public-only roots.
    """

    index = _validate_index(index)
    try:
        child = BIP32KeyData.b58decode(derive(root, index))
    except BTClibValueError as e:
        raise DerivationError(str(e)) from e
    return key_pair_from_xkey(child, network)
