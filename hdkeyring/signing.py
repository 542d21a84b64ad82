#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Signing dispatcher.

Signing requests are addressed by address (messages)
or by public key (transaction inputs):
the dispatcher resolves them to the registered key pair
and delegates the actual signature to btclib.

Messages are signed with the Bitcoin Message Signing scheme (BMS),
i.e. the compact 65-bytes recoverable ECDSA signature
of the "Bitcoin Signed Message" envelope, base64 encoded.
Signatures are generated for the compressed public key:
following the Electrum approach they verify against the
P2PKH, P2WPKH, and P2WPKH-P2SH addresses of that key.
BMS has no taproot flavor: P2TR accounts cannot sign messages.

Transaction inputs are signed in batch: all inputs are resolved first,
then the transaction signs and finalizes all of them or none:
a failing input leaves the transaction untouched.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from btclib.ecc import bms

from hdkeyring.address import AddressLike, AddressType, PubKey, PubKeyLike, as_pub_key
from hdkeyring.derivation import KeyPair
from hdkeyring.exceptions import InvalidOperationError
from hdkeyring.registry import AccountRegistry

logger = logging.getLogger(__name__)

Message = Union[str, bytes]


def _msg_bytes(msg: Message) -> bytes:
    return msg.encode("utf-8") if isinstance(msg, str) else bytes(msg)


class SignRequest(NamedTuple):
    index: int
    key_pair: KeyPair
    sighash_types: Optional[Sequence[int]] = None


class SignableTransaction(Protocol):
    "Transaction container whose inputs are signed in place."

    def sign_and_finalize(self, requests: Sequence[SignRequest]) -> None:
        "Sign the requested inputs and finalize all of them, or raise unchanged."


@dataclass(frozen=True)
class ToSignInput:
    index: int
    public_key: PubKey
    sighash_types: Optional[List[int]] = field(default=None)

    def __init__(
        self,
        index: int,
        public_key: PubKeyLike,
        sighash_types: Optional[Sequence[int]] = None,
    ) -> None:
        object.__setattr__(self, "index", int(index))
        object.__setattr__(self, "public_key", as_pub_key(public_key))
        types = None if sighash_types is None else list(sighash_types)
        object.__setattr__(self, "sighash_types", types)

    @classmethod
    def from_dict(cls, dict_: Mapping[str, Any]) -> "ToSignInput":
        return cls(dict_["index"], dict_["publicKey"], dict_.get("sighashTypes"))


ToSignInputLike = Union[ToSignInput, Mapping[str, Any]]


class SigningDispatcher:
    def __init__(self, registry: AccountRegistry) -> None:
        self.registry = registry

    def sign_message(self, address: AddressLike, text: Message) -> str:
        "Return the base64 BMS signature of text by the address key."

        key_pair = self.registry.find_by_address(address).key_pair
        if self.registry.cache.address_type == AddressType.P2TR:
            raise InvalidOperationError("message signing not available for p2tr")
        sig = bms.sign(_msg_bytes(text), key_pair.wif())
        return sig.b64encode()

    def sign_personal_message(self, address: AddressLike, message: Message) -> str:
        return self.sign_message(address, message)

    def sign_typed_data(self, address: AddressLike, typed_data: Any) -> str:
        """Sign the canonical JSON serialization of typed_data.

        Keys are sorted and separators are compact,
        so that equal content always results in the same message.
        """
        text = json.dumps(typed_data, sort_keys=True, separators=(",", ":"))
        return self.sign_message(address, text)

    def verify_message(
        self, address: AddressLike, text: Message, signature: Union[str, bms.Sig]
    ) -> bool:
        return bms.verify(_msg_bytes(text), str(address), signature)

    def sign_transaction_inputs(
        self, transaction: SignableTransaction, inputs: Sequence[ToSignInputLike]
    ) -> None:
        "Sign the inputs of the transaction, then finalize all of them."

        to_sign = [
            i if isinstance(i, ToSignInput) else ToSignInput.from_dict(i)
            for i in inputs
        ]
        key_pairs = [
            self.registry.find_by_pub_key(i.public_key).key_pair for i in to_sign
        ]
        requests = [
            SignRequest(i.index, key_pair, i.sighash_types)
            for i, key_pair in zip(to_sign, key_pairs)
        ]
        logger.debug("signing %d transaction inputs", len(requests))
        transaction.sign_and_finalize(requests)

    def export_private_key(self, address: AddressLike) -> str:
        "Return the WIF of the address private key."
        return self.registry.find_by_address(address).key_pair.wif()

    def export_public_key(self, address: AddressLike) -> str:
        return self.registry.find_by_address(address).key_pair.pub_key.hex()
