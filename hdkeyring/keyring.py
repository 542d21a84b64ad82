#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Hierarchical deterministic private keyring.

An HDPrivateKey owns a seed and the root extended key
obtained applying its derivation path (by default "m/44'/0'/0'/0")
to the BIP32 master key of the seed.
The root is the implicit account at index 0;
further accounts are activated with add_accounts
and derived as children of the root:

    keyring = HDPrivateKey.from_mnemonic(mnemonic)
    address = keyring.add_accounts(1)[0]
    sig = keyring.sign_message(address, "hello")
    assert keyring.verify_message(address, "hello", sig)

The seed is never used by signing operations:
it is only available through serialize.
Changing the derivation path resets all derived accounts.

An HDPrivateKey is not thread-safe:
path changes and account additions must be serialized by the caller.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from btclib.psbt import Psbt

from hdkeyring.address import AddressLike, AddressType, PubKey
from hdkeyring.cache import AccountCache
from hdkeyring.derivation import derive_root, validate_path
from hdkeyring.exceptions import InvalidOperationError
from hdkeyring.psbt_signer import PsbtSigner
from hdkeyring.registry import AccountRegistry
from hdkeyring.seed import (
    assert_valid_seed,
    seed_from_hex,
    seed_from_mnemonic,
    seed_from_mnemonic_async,
)
from hdkeyring.settings import DEFAULT_SETTINGS, Settings
from hdkeyring.signing import (
    Message,
    SignableTransaction,
    SigningDispatcher,
    ToSignInputLike,
)
from hdkeyring.state import SerializedHDKey

logger = logging.getLogger(__name__)


class HDPrivateKey:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = DEFAULT_SETTINGS if settings is None else settings
        # only the root keyring, at index 0, can be serialized
        self.child_index = 0
        self.hd_path = self.settings.hd_path
        self._address_type = self.settings.address_type
        self._seed: Optional[bytes] = None
        self._registry: Optional[AccountRegistry] = None
        self._dispatcher: Optional[SigningDispatcher] = None

    def __repr__(self) -> str:
        n = len(self._registry) if self._registry is not None else None
        return (
            f"{type(self).__name__}(hd_path={self.hd_path!r}, "
            f"address_type={self._address_type.name}, accounts={n})"
        )

    def _init_from_seed(self, seed: bytes) -> "HDPrivateKey":
        seed = bytes(seed)
        assert_valid_seed(seed)
        network = self.settings.network
        root = derive_root(seed, self.hd_path, network)
        cache = AccountCache(root, self._address_type, network)
        self._registry = AccountRegistry(cache)
        self._dispatcher = SigningDispatcher(self._registry)
        self._seed = seed
        logger.debug("keyring initialized at %s", self.hd_path)
        return self

    @property
    def registry(self) -> AccountRegistry:
        if self._registry is None:
            raise InvalidOperationError("uninitialized keyring")
        return self._registry

    @property
    def dispatcher(self) -> SigningDispatcher:
        if self._dispatcher is None:
            raise InvalidOperationError("uninitialized keyring")
        return self._dispatcher

    @property
    def is_initialized(self) -> bool:
        return self._seed is not None

    @property
    def public_key(self) -> PubKey:
        "Public key of the root account."
        return self.registry.root.key_pair.pub_key

    @property
    def address_type(self) -> AddressType:
        return self._address_type

    @address_type.setter
    def address_type(self, address_type: AddressType) -> None:
        self._address_type = AddressType(address_type)
        if self._registry is not None:
            self._registry.cache.set_address_type(self._address_type)

    # construction

    @classmethod
    def from_seed(
        cls, seed: bytes, settings: Optional[Settings] = None
    ) -> "HDPrivateKey":
        return cls(settings)._init_from_seed(seed)

    @classmethod
    def from_options(
        cls, options: Mapping[str, Any], settings: Optional[Settings] = None
    ) -> "HDPrivateKey":
        "Return the keyring of the hex seed in options['seed']."
        return cls.from_seed(seed_from_hex(options["seed"]), settings)

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        passphrase: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> "HDPrivateKey":
        """Return the keyring of the BIP39 mnemonic.

        If the passphrase is None, the settings passphrase is used.
        """
        keyring = cls(settings)
        if passphrase is None:
            passphrase = keyring.settings.passphrase
        return keyring._init_from_seed(seed_from_mnemonic(mnemonic, passphrase))

    @classmethod
    async def from_mnemonic_async(
        cls,
        mnemonic: str,
        passphrase: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> "HDPrivateKey":
        keyring = cls(settings)
        if passphrase is None:
            passphrase = keyring.settings.passphrase
        seed = await seed_from_mnemonic_async(mnemonic, passphrase)
        return keyring._init_from_seed(seed)

    @classmethod
    def from_phrase(
        cls, phrase: str, settings: Optional[Settings] = None
    ) -> "HDPrivateKey":
        return cls.from_mnemonic(phrase, None, settings)

    @classmethod
    def from_private_key(cls, prv_key: Any) -> "HDPrivateKey":
        raise InvalidOperationError("private key import not allowed for HDPrivateKey")

    # derivation path

    def change_hd_path(self, hd_path: str) -> None:
        "Switch the derivation path, dropping all derived accounts."

        if self._seed is None:
            raise InvalidOperationError("uninitialized keyring")
        hd_path = validate_path(hd_path)
        root = derive_root(self._seed, hd_path, self.settings.network)
        self.registry.reset(root)
        self.hd_path = hd_path
        logger.debug("derivation path changed to %s", hd_path)

    # accounts

    def add_accounts(self, number: int = 1) -> List[str]:
        return [str(address) for address in self.registry.add_accounts(number)]

    def get_accounts(self) -> List[str]:
        "Return the root address, then the activated account addresses."
        return [str(address) for address in self.registry.get_accounts()]

    # signing

    def sign_message(self, address: AddressLike, text: Message) -> str:
        return self.dispatcher.sign_message(address, text)

    def sign_personal_message(self, address: AddressLike, message: Message) -> str:
        return self.dispatcher.sign_personal_message(address, message)

    def sign_typed_data(self, address: AddressLike, typed_data: Any) -> str:
        return self.dispatcher.sign_typed_data(address, typed_data)

    def verify_message(self, address: AddressLike, text: Message, sig: str) -> bool:
        return self.dispatcher.verify_message(address, text, sig)

    def sign_transaction_inputs(
        self, transaction: SignableTransaction, inputs: Sequence[ToSignInputLike]
    ) -> None:
        self.dispatcher.sign_transaction_inputs(transaction, inputs)

    def sign_psbt(
        self,
        psbt: Union[Psbt, SignableTransaction],
        inputs: Sequence[ToSignInputLike],
    ) -> None:
        "Sign the inputs of a psbt in place, then finalize all of them."
        transaction = PsbtSigner(psbt) if isinstance(psbt, Psbt) else psbt
        self.sign_transaction_inputs(transaction, inputs)

    def export_private_key(self, address: AddressLike) -> str:
        return self.dispatcher.export_private_key(address)

    export_account = export_private_key

    def export_public_key(self, address: AddressLike) -> str:
        return self.dispatcher.export_public_key(address)

    # persistence

    def serialize(self) -> Mapping[str, Any]:
        if self.child_index != 0:
            raise InvalidOperationError("only the root keyring can be serialized")
        if self._seed is None:
            raise InvalidOperationError("uninitialized keyring")
        n = len(self.registry)
        state = SerializedHDKey(n, self._seed.hex(), self._address_type)
        return state.to_dict()

    @classmethod
    def deserialize(
        cls,
        state: Union[SerializedHDKey, Mapping[str, Any]],
        settings: Optional[Settings] = None,
    ) -> "HDPrivateKey":
        if not isinstance(state, SerializedHDKey):
            state = SerializedHDKey.from_dict(state)
        keyring = cls.from_seed(seed_from_hex(state.seed), settings)
        keyring.address_type = state.address_type
        if state.number_of_accounts:
            keyring.add_accounts(state.number_of_accounts)
        return keyring
