#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdkeyring.address` module."

import pytest
from btclib.exceptions import BTClibValueError

from hdkeyring.address import (
    Address,
    AddressType,
    PubKey,
    address_from_pub_key,
    as_address,
    as_pub_key,
)

# generator point, i.e. the public key of the private key 1
G_HEX = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


def test_pub_key() -> None:
    pub_key = PubKey.from_hex(G_HEX)
    assert pub_key.hex() == G_HEX
    assert str(pub_key) == G_HEX
    assert pub_key == PubKey(bytes.fromhex(G_HEX))
    assert pub_key == PubKey.from_hex(" " + G_HEX.upper() + " ")
    assert pub_key == as_pub_key(G_HEX)
    assert pub_key == as_pub_key(bytes.fromhex(G_HEX))
    assert pub_key is as_pub_key(pub_key)
    assert len({pub_key, PubKey.from_hex(G_HEX)}) == 1


def test_pub_key_exceptions() -> None:

    with pytest.raises(BTClibValueError, match="invalid public key length: "):
        PubKey.from_hex(G_HEX[:-2])

    with pytest.raises(BTClibValueError, match="not a compressed public key: "):
        PubKey.from_hex("04" + G_HEX[2:])

    with pytest.raises(BTClibValueError, match="invalid public key hex: "):
        PubKey.from_hex("not hex")


def test_address() -> None:
    addr = "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"
    assert Address(addr) == Address(f" {addr}\n")
    assert str(Address(addr)) == addr
    assert as_address(addr) == Address(addr)
    # base58 is case sensitive
    assert Address(addr) != Address(addr.lower())

    # bech32 is not
    addr = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
    assert Address(addr.upper()) == Address(addr)
    assert str(Address(addr.upper())) == addr


def test_address_from_pub_key() -> None:
    pub_key = PubKey.from_hex(G_HEX)

    addr = address_from_pub_key(pub_key)
    assert addr == Address("1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH")
    assert addr == address_from_pub_key(pub_key, AddressType.P2PKH, "mainnet")

    addr = address_from_pub_key(pub_key, AddressType.P2WPKH)
    assert addr == Address("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4")

    addr = address_from_pub_key(pub_key, AddressType.P2SH_P2WPKH)
    assert addr.value.startswith("3")

    addr = address_from_pub_key(pub_key, AddressType.P2TR)
    assert addr.value.startswith("bc1p")

    # the tag can be provided as int
    assert address_from_pub_key(pub_key, 1) == address_from_pub_key(
        pub_key, AddressType.P2WPKH
    )

    addr = address_from_pub_key(pub_key, AddressType.P2WPKH, "testnet")
    assert addr.value.startswith("tb1q")


def test_address_type() -> None:
    assert [t.value for t in AddressType] == [0, 1, 2, 3]
    with pytest.raises(ValueError):
        AddressType(4)
