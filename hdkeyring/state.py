#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Persistable keyring state.

Only the seed, the number of activated accounts, and the address type
are persisted: derived private keys never are,
as they can be derived again from the seed.

The dictionary representation uses the keys
"numberOfAccounts", "seed", and "addressType".
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from hdkeyring.address import AddressType
from hdkeyring.exceptions import DeserializationError


@dataclass(frozen=True)
class SerializedHDKey:
    number_of_accounts: int
    seed: str
    address_type: AddressType = AddressType.P2PKH

    def to_dict(self) -> Dict[str, Any]:
        return {
            "numberOfAccounts": self.number_of_accounts,
            "seed": self.seed,
            "addressType": int(self.address_type),
        }

    @classmethod
    def from_dict(cls, dict_: Mapping[str, Any]) -> "SerializedHDKey":

        number_of_accounts = dict_.get("numberOfAccounts")
        seed = dict_.get("seed")
        if number_of_accounts is None or not seed:
            err_msg = "numberOfAccounts and a non-empty seed are required"
            raise DeserializationError(err_msg)
        if isinstance(number_of_accounts, bool) or not isinstance(
            number_of_accounts, int
        ):
            raise DeserializationError(
                f"invalid numberOfAccounts: {number_of_accounts!r}"
            )
        if number_of_accounts < 0:
            err_msg = f"negative numberOfAccounts: {number_of_accounts}"
            raise DeserializationError(err_msg)
        if not isinstance(seed, str):
            raise DeserializationError("seed must be a hex string")

        address_type = dict_.get("addressType")
        if address_type is None:
            address_type = AddressType.P2PKH
        try:
            address_type = AddressType(address_type)
        except ValueError as e:
            raise DeserializationError(f"invalid addressType: {address_type!r}") from e

        return cls(number_of_accounts, seed, address_type)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: str) -> "SerializedHDKey":
        try:
            dict_ = json.loads(data)
        except ValueError as e:
            raise DeserializationError("invalid json") from e
        if not isinstance(dict_, dict):
            raise DeserializationError("not a json object")
        return cls.from_dict(dict_)
