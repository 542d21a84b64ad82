#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Keyring settings.

The signing network is fixed per keyring instance:
changing it requires building the keyring with explicit settings.

The default mnemonic passphrase is the non-empty "bells" literal,
not the empty string of the BIP39 standard:
seeds obtained from the same mnemonic by BIP39-compliant wallets
will differ, unless the empty passphrase is explicitly provided.
"""

from dataclasses import dataclass, replace
from typing import Any

from btclib.network import NETWORKS

from hdkeyring.address import AddressType
from hdkeyring.derivation import validate_path
from hdkeyring.exceptions import InvalidOperationError

DEFAULT_HD_PATH = "m/44'/0'/0'/0"
DEFAULT_PASSPHRASE = "bells"
DEFAULT_NETWORK = "mainnet"


@dataclass(frozen=True)
class Settings:
    network: str = DEFAULT_NETWORK
    hd_path: str = DEFAULT_HD_PATH
    passphrase: str = DEFAULT_PASSPHRASE
    address_type: AddressType = AddressType.P2PKH

    def __post_init__(self) -> None:
        self.assert_valid()

    def assert_valid(self) -> None:
        if self.network not in NETWORKS:
            raise InvalidOperationError(f"unknown network: {self.network}")
        validate_path(self.hd_path)
        # raises ValueError for unknown tags
        AddressType(self.address_type)

    def evolve(self, **changes: Any) -> "Settings":
        "Return a copy of the settings with the given fields replaced."
        return replace(self, **changes)


DEFAULT_SETTINGS = Settings()
