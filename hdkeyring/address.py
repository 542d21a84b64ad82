#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Address and public key value types.

Accounts are looked up by address or by public key:
both are wrapped in frozen dataclasses with structural equality,
so that differently encoded inputs
(e.g. upper case bech32 addresses, upper case hex public keys)
resolve to the same account.

The address encoding scheme is selected by an AddressType tag:

+-------------+-----+-------------------------------------+
| tag         | int | address                             |
+=============+=====+=====================================+
| P2PKH       |  0  | base58 p2pkh, '1...'                |
+-------------+-----+-------------------------------------+
| P2WPKH      |  1  | bech32 v0 p2wpkh, 'bc1q...'         |
+-------------+-----+-------------------------------------+
| P2TR        |  2  | bech32m v1 p2tr key path, 'bc1p...' |
+-------------+-----+-------------------------------------+
| P2SH_P2WPKH |  3  | base58 p2sh-wrapped p2wpkh, '3...'  |
+-------------+-----+-------------------------------------+
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from btclib import b32, b58
from btclib.exceptions import BTClibValueError

_PUB_KEY_SIZE = 33


class AddressType(IntEnum):
    P2PKH = 0
    P2WPKH = 1
    P2TR = 2
    P2SH_P2WPKH = 3


@dataclass(frozen=True)
class PubKey:
    "Compressed SEC public key."

    key: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", bytes(self.key))
        self.assert_valid()

    def assert_valid(self) -> None:
        if len(self.key) != _PUB_KEY_SIZE:
            err_msg = f"invalid public key length: {len(self.key)} bytes"
            err_msg += f" instead of {_PUB_KEY_SIZE}"
            raise BTClibValueError(err_msg)
        if self.key[0] not in (2, 3):
            raise BTClibValueError(f"not a compressed public key: {self.key.hex()}")

    @classmethod
    def from_hex(cls, hex_str: str) -> "PubKey":
        try:
            key = bytes.fromhex(hex_str.strip())
        except ValueError as e:
            raise BTClibValueError(f"invalid public key hex: {hex_str!r}") from e
        return cls(key)

    def hex(self) -> str:
        return self.key.hex()

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class Address:
    "Encoded address; bech32 ones are normalized to lower case."

    value: str

    def __post_init__(self) -> None:
        value = self.value.strip()
        if b32.has_segwit_prefix(value):
            value = value.lower()
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.value


AddressLike = Union[Address, str]
PubKeyLike = Union[PubKey, bytes, str]


def as_address(address: AddressLike) -> Address:
    return address if isinstance(address, Address) else Address(address)


def as_pub_key(pub_key: PubKeyLike) -> PubKey:
    if isinstance(pub_key, PubKey):
        return pub_key
    if isinstance(pub_key, str):
        return PubKey.from_hex(pub_key)
    return PubKey(pub_key)


def address_from_pub_key(
    pub_key: PubKey,
    address_type: AddressType = AddressType.P2PKH,
    network: str = "mainnet",
) -> Address:
    "Return the address of the given type for the public key."

    address_type = AddressType(address_type)
    key = pub_key.key
    if address_type == AddressType.P2PKH:
        return Address(b58.p2pkh(key, network))
    if address_type == AddressType.P2WPKH:
        return Address(b32.p2wpkh(key, network))
    if address_type == AddressType.P2SH_P2WPKH:
        return Address(b58.p2wpkh_p2sh(key, network))
    # P2TR key path spending, without script tree
    return Address(b32.p2tr(key, network=network))
