#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdkeyring.derivation` module."

import pytest
from btclib.bip32 import BIP32KeyData

from hdkeyring.address import PubKey, address_from_pub_key
from hdkeyring.derivation import (
    HARDENED,
    KeyPair,
    derive_child,
    derive_root,
    key_pair_from_xkey,
    validate_path,
)
from hdkeyring.exceptions import DerivationError, InvalidOperationError
from hdkeyring.seed import seed_from_mnemonic

# BIP32 test vector 1
SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
XPRV_0H_1 = "xprv9wTYmMFdV23N2TdNG573QoEsfRrWKQgWeibmLntzniatZvR9BmLnvSxqu53Kw1UmYPxLgboyZQaXwTCg8MSY3H2EU4pWcQDnRnrVA1xe8fs"
XPUB_0H_1 = "xpub6ASuArnXKPbfEwhqN6e3mwBcDTgzisQN1wXN9BJcM47sSikHjJf3UFHKkNAWbWMiGj7Wf5uMash7SyYq527Hqck2AxYysAA7xmALppuCkwQ"


def test_bip32_test_vector() -> None:

    root = derive_root(SEED, "m/0'")
    key_pair = derive_child(root, 1)

    xprv = BIP32KeyData.b58decode(XPRV_0H_1)
    xpub = BIP32KeyData.b58decode(XPUB_0H_1)
    assert key_pair.pub_key == PubKey(xpub.key)
    assert key_pair.prv_key == int.from_bytes(xprv.key[1:], "big")
    assert key_pair.network == "mainnet"

    # same key when the whole path is applied to the seed
    assert key_pair_from_xkey(derive_root(SEED, "m/0h/1")) == key_pair


def test_slip132_test_vector() -> None:
    mnemonic = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
    seed = seed_from_mnemonic(mnemonic, "")

    root = derive_root(seed, "m/44'/0'/0'/0")
    key_pair = derive_child(root, 0)
    addr = address_from_pub_key(key_pair.pub_key)
    assert addr.value == "1LqBGSKuX5yYUonjxT5qGfpUsXKYYWeabA"


def test_determinism() -> None:
    seed = b"\x00" * 32
    path = "m/44'/0'/0'/0"

    root = derive_root(seed, path)
    assert root == derive_root(seed, path)

    key_pairs = [derive_child(root, i) for i in range(4)]
    assert key_pairs == [derive_child(derive_root(seed, path), i) for i in range(4)]
    assert len({key_pair.pub_key for key_pair in key_pairs}) == 4

    # the root itself is different from all of its children
    assert key_pair_from_xkey(root) not in key_pairs

    # a different path results in different keys
    other_root = derive_root(seed, "m/44'/0'/1'/0")
    assert derive_child(other_root, 1) != derive_child(root, 1)


def test_hardened_child() -> None:
    root = derive_root(SEED, "m")
    assert derive_child(root, HARDENED) == key_pair_from_xkey(derive_root(SEED, "m/0'"))
    assert derive_child(root, HARDENED) != derive_child(root, 0)


def test_public_root() -> None:
    xpub = BIP32KeyData.b58decode(XPUB_0H_1)
    key_pair = key_pair_from_xkey(xpub)
    assert not key_pair.has_prv_key
    assert key_pair.pub_key == PubKey(xpub.key)

    child = derive_child(xpub, 2)
    assert not child.has_prv_key
    xprv = BIP32KeyData.b58decode(XPRV_0H_1)
    assert child.pub_key == derive_child(xprv, 2).pub_key

    with pytest.raises(DerivationError, match="invalid hardened derivation"):
        derive_child(xpub, HARDENED)


def test_key_pair() -> None:
    pub_key = PubKey.from_hex(
        "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    )
    key_pair = KeyPair(pub_key, 1)
    assert key_pair.has_prv_key
    assert key_pair.wif() == "KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn"
    # private key is not in the representation
    assert "prv_key" not in repr(key_pair)

    with pytest.raises(InvalidOperationError, match="public-only key pair"):
        KeyPair(pub_key).wif()


def test_validate_path() -> None:
    assert validate_path(" m/44'/0'/0'/0 ") == "m/44'/0'/0'/0"
    assert validate_path("m/44h/0h/0h/0") == "m/44h/0h/0h/0"

    for path in ("", "   ", "m/a/1", "m/44'/-1", "m/2147483648"):
        with pytest.raises(DerivationError, match="invalid derivation path: "):
            validate_path(path)

    with pytest.raises(DerivationError, match="invalid derivation path: "):
        validate_path(None)  # type: ignore


def test_exceptions() -> None:

    with pytest.raises(DerivationError, match="bits for seed"):
        derive_root(b"\x00" * 15, "m")

    with pytest.raises(DerivationError, match="bits for seed"):
        derive_root(b"\x00" * 65, "m")

    with pytest.raises(DerivationError, match="invalid derivation path: "):
        derive_root(SEED, "m/x")

    root = derive_root(SEED, "m")
    for index in (-1, 0xFFFFFFFF + 1, "1", 1.0, True):
        with pytest.raises(DerivationError, match="invalid child index: "):
            derive_child(root, index)  # type: ignore
