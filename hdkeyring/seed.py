#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Seed sources.

A keyring seed is obtained either from its hex representation
or from a BIP39 mnemonic sentence and passphrase.

Mnemonic to seed conversion uses PBKDF2-HMAC-SHA512 with 2048 iterations:
it is deliberately slow, hence the awaitable variant,
which runs it in the default executor of the running event loop.
"""

import asyncio
from typing import Optional

from btclib.exceptions import BTClibValueError
from btclib.mnemonic import bip39

from hdkeyring.exceptions import DerivationError
from hdkeyring.settings import DEFAULT_PASSPHRASE

# BIP32 seed limits
MIN_SEED_SIZE = 16
MAX_SEED_SIZE = 64


def assert_valid_seed(seed: bytes) -> None:
    if not MIN_SEED_SIZE <= len(seed) <= MAX_SEED_SIZE:
        err_msg = f"invalid seed length: {len(seed)} bytes"
        err_msg += f" instead of [{MIN_SEED_SIZE}, {MAX_SEED_SIZE}]"
        raise DerivationError(err_msg)


def seed_from_hex(hex_seed: str) -> bytes:
    try:
        seed = bytes.fromhex(hex_seed.strip())
    except (AttributeError, ValueError) as e:
        raise DerivationError(f"invalid hex seed: {hex_seed!r}") from e
    assert_valid_seed(seed)
    return seed


def seed_from_mnemonic(mnemonic: str, passphrase: Optional[str] = None) -> bytes:
    """Return the seed of the BIP39 mnemonic sentence.

    If the passphrase is None, DEFAULT_PASSPHRASE is used.
    """

    if passphrase is None:
        passphrase = DEFAULT_PASSPHRASE
    try:
        return bip39.seed_from_mnemonic(mnemonic, passphrase)
    except (BTClibValueError, ValueError, IndexError) as e:
        # do not leak the mnemonic in the error message
        raise DerivationError("invalid mnemonic") from e


async def seed_from_mnemonic_async(
    mnemonic: str, passphrase: Optional[str] = None
) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, seed_from_mnemonic, mnemonic, passphrase)
