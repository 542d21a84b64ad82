#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Memoization of child index to account entry.

Each index is derived at most once for the lifetime of the root:
the cache must be invalidated whenever the root changes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from btclib.bip32 import BIP32KeyData

from hdkeyring.address import Address, AddressType, PubKey, address_from_pub_key
from hdkeyring.derivation import KeyPair, derive_child

logger = logging.getLogger(__name__)

DeriveChild = Callable[[BIP32KeyData, int, Optional[str]], KeyPair]
AddressFromPubKey = Callable[[PubKey, AddressType, str], Address]


@dataclass(frozen=True)
class AccountEntry:
    index: int
    address: Address
    key_pair: KeyPair


class AccountCache:
    def __init__(
        self,
        root: BIP32KeyData,
        address_type: AddressType = AddressType.P2PKH,
        network: str = "mainnet",
        derive: DeriveChild = derive_child,
        address_from: AddressFromPubKey = address_from_pub_key,
    ) -> None:
        self.root = root
        self.address_type = AddressType(address_type)
        self.network = network
        self._derive = derive
        self._address_from = address_from
        self._entries: Dict[int, AccountEntry] = {}

    def get(self, index: int) -> AccountEntry:
        entry = self._entries.get(index)
        if entry is None:
            logger.debug("deriving child key at index %d", index)
            key_pair = self._derive(self.root, index, self.network)
            entry = AccountEntry(index, self.address(key_pair.pub_key), key_pair)
            self._entries[index] = entry
        return entry

    def address(self, pub_key: PubKey) -> Address:
        return self._address_from(pub_key, self.address_type, self.network)

    def set_address_type(self, address_type: AddressType) -> None:
        "Re-encode the addresses of cached entries, without derivation."
        self.address_type = AddressType(address_type)
        self._entries = {
            i: AccountEntry(i, self.address(entry.key_pair.pub_key), entry.key_pair)
            for i, entry in self._entries.items()
        }

    def invalidate(self, root: BIP32KeyData) -> None:
        "Clear all entries, binding the cache to the new root."
        self._entries = {}
        self.root = root

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: object) -> bool:
        return index in self._entries
