#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Registry of the activated accounts of a keyring.

The root extended key is the implicit account at index 0,
always listed first; activated accounts are its children,
registered in increasing index order starting at 1.

Accounts are never removed, except when the root itself changes:
in that case the account cache is invalidated and the registry emptied
in a single step.

A derived key pair already in the registry is skipped
and the next index is tried: it does not count as a new account.
"""

import logging
from typing import List, Optional, Set

from btclib.bip32 import BIP32KeyData
from btclib.exceptions import BTClibValueError

from hdkeyring.address import (
    Address,
    AddressLike,
    PubKey,
    PubKeyLike,
    as_address,
    as_pub_key,
)
from hdkeyring.cache import AccountCache, AccountEntry
from hdkeyring.derivation import key_pair_from_xkey
from hdkeyring.exceptions import AccountNotFoundError

logger = logging.getLogger(__name__)


class AccountRegistry:
    def __init__(self, cache: AccountCache) -> None:
        self.cache = cache
        self._root_key_pair = key_pair_from_xkey(cache.root, cache.network)
        self._indexes: List[int] = []
        self._pub_keys: Set[PubKey] = set()

    @property
    def root(self) -> AccountEntry:
        key_pair = self._root_key_pair
        return AccountEntry(0, self.cache.address(key_pair.pub_key), key_pair)

    @property
    def entries(self) -> List[AccountEntry]:
        "Registered accounts, in registration order, root excluded."
        return [self.cache.get(i) for i in self._indexes]

    def __len__(self) -> int:
        return len(self._indexes)

    def add_accounts(self, number: int = 1) -> List[Address]:
        "Register number new accounts, returning their addresses."

        if isinstance(number, bool) or not isinstance(number, int):
            raise ValueError(f"invalid number of accounts: {number!r}")
        if number < 0:
            raise ValueError(f"negative number of accounts: {number}")

        count = number
        index = len(self._indexes) if self._indexes else 1
        new_addresses: List[Address] = []
        while count:
            entry = self.cache.get(index)
            pub_key = entry.key_pair.pub_key
            if pub_key in self._pub_keys:
                logger.debug("skipping already registered key at index %d", index)
            else:
                self._indexes.append(index)
                self._pub_keys.add(pub_key)
                new_addresses.append(entry.address)
                count -= 1
            index += 1

        logger.debug("added %d accounts, %d registered", number, len(self._indexes))
        return new_addresses

    def get_accounts(self) -> List[Address]:
        return [self.root.address] + [entry.address for entry in self.entries]

    def _candidates(self, include_root: bool) -> List[AccountEntry]:
        entries = self.entries
        return [self.root] + entries if include_root else entries

    def lookup_address(
        self, address: AddressLike, include_root: bool = False
    ) -> Optional[AccountEntry]:
        address = as_address(address)
        for entry in self._candidates(include_root):
            if entry.address == address:
                return entry
        return None

    def lookup_pub_key(
        self, pub_key: PubKeyLike, include_root: bool = False
    ) -> Optional[AccountEntry]:
        try:
            key = as_pub_key(pub_key)
        except BTClibValueError:
            # not a public key, so not a registered one
            return None
        for entry in self._candidates(include_root):
            if entry.key_pair.pub_key == key:
                return entry
        return None

    def find_by_address(
        self, address: AddressLike, include_root: bool = False
    ) -> AccountEntry:
        entry = self.lookup_address(address, include_root)
        if entry is None:
            raise AccountNotFoundError(f"account not found for address: {address}")
        return entry

    def find_by_pub_key(
        self, pub_key: PubKeyLike, include_root: bool = False
    ) -> AccountEntry:
        entry = self.lookup_pub_key(pub_key, include_root)
        if entry is None:
            raise AccountNotFoundError(f"account not found for public key: {pub_key}")
        return entry

    def reset(self, root: BIP32KeyData) -> None:
        "Bind to a new root: invalidate the cache and empty the registry."
        root_key_pair = key_pair_from_xkey(root, self.cache.network)
        self.cache.invalidate(root)
        self._root_key_pair = root_key_pair
        self._indexes = []
        self._pub_keys = set()
