#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Exception classes.

They discriminate between Exceptions raised by the keyring
and those raised by other codebase, btclib included.

Each of them also derives from the regular ValueError, LookupError,
or RuntimeError (through the btclib versions where available),
so that callers are free to deal with the builtin hierarchy only.
"""

from btclib.exceptions import BTClibRuntimeError, BTClibValueError


class HDKeyringError(Exception):
    pass


class DerivationError(HDKeyringError, BTClibValueError):
    "Invalid seed, mnemonic, derivation path, or child index."


class AccountNotFoundError(HDKeyringError, LookupError):
    "No registered account matches the given address or public key."


class InvalidOperationError(HDKeyringError, BTClibRuntimeError):
    "Operation not allowed in the current keyring context."


class DeserializationError(HDKeyringError, BTClibValueError):
    "Malformed persisted keyring state."
