#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Signing and finalization of Partially Signed Bitcoin Transaction inputs.

https://github.com/bitcoin/bips/blob/master/bip-0174.mediawiki

PsbtSigner wraps a btclib Psbt and fills its inputs in place:
the Signer role stores a partial signature for each signed input,
the Input Finalizer role builds the final scriptSig/scriptWitness
of every input and clears the signing metadata.

Only single-key inputs are supported:

- P2PKH: final scriptSig [sig, pub_key]
- P2WPKH: final scriptWitness [sig, pub_key]
- P2WPKH-P2SH: final scriptSig [redeem_script],
  final scriptWitness [sig, pub_key]

Each input is signed with its own sig_hash_type (SIGHASH_ALL if missing),
which must be one of the sighash types allowed by the signing request
(only SIGHASH_ALL if none are provided).

A PSBT is finalized as soon as any of its inputs has a final script:
it cannot be signed or finalized anymore, whatever PsbtSigner wraps it.
Finalization is all or nothing: if any input lacks a signature
no input is finalized; sign_and_finalize also signs all the requested
inputs or none of them.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from btclib.ecc import dsa
from btclib.exceptions import BTClibValueError
from btclib.hashes import hash160
from btclib.psbt import Psbt, extract_tx
from btclib.script import Witness, serialize, sig_hash, type_and_payload
from btclib.tx import Tx, TxOut

from hdkeyring.derivation import KeyPair
from hdkeyring.exceptions import InvalidOperationError
from hdkeyring.signing import SignRequest

PartialSigs = Dict[bytes, bytes]
FinalScripts = List[Tuple[bytes, Witness]]


def hash_type_for_input(
    sig_hash_type: Optional[int], sighash_types: Optional[Sequence[int]] = None
) -> int:
    """Return the hash type of an input, if allowed.

    The hash type is the input sig_hash_type, SIGHASH_ALL if missing;
    it must be one of the allowed sighash_types,
    only SIGHASH_ALL if none is provided.
    """

    hash_type = sig_hash.ALL if sig_hash_type is None else sig_hash_type
    try:
        sig_hash.assert_valid_hash_type(hash_type)
    except BTClibValueError as e:
        raise InvalidOperationError(str(e)) from e
    # SIGHASH_DEFAULT is for taproot only
    if hash_type == sig_hash.DEFAULT:
        raise InvalidOperationError("invalid sig_hash type for ECDSA: 0x0")
    allowed = list(sighash_types) if sighash_types else [sig_hash.ALL]
    if hash_type not in allowed:
        err_msg = f"sig_hash type not allowed: {hex(hash_type)}"
        err_msg += f" not in {[hex(x) for x in allowed]}"
        raise InvalidOperationError(err_msg)
    return hash_type


class PsbtSigner:
    def __init__(self, psbt: Psbt) -> None:
        self.psbt = psbt

    @property
    def finalized(self) -> bool:
        return any(
            psbt_in.final_script_sig or psbt_in.final_script_witness.stack
            for psbt_in in self.psbt.inputs
        )

    def _assert_not_finalized(self) -> None:
        if self.finalized:
            raise InvalidOperationError("finalized psbt")

    def _prevout(self, i: int) -> TxOut:
        psbt_in = self.psbt.inputs[i]
        if psbt_in.witness_utxo:
            return psbt_in.witness_utxo
        if psbt_in.non_witness_utxo:
            vout = self.psbt.tx.vin[i].prev_out.vout
            return psbt_in.non_witness_utxo.vout[vout]
        raise InvalidOperationError(f"missing utxo for input {i}")

    def _script_type(self, i: int) -> Tuple[str, bytes]:
        "Return the input script type and its public key hash."

        script = self._prevout(i).script_pub_key.script
        script_type, payload = type_and_payload(script)
        if script_type == "p2sh":
            redeem_script = self.psbt.inputs[i].redeem_script
            if not redeem_script or hash160(redeem_script) != payload:
                raise InvalidOperationError(f"invalid redeem script for input {i}")
            script_type, payload = type_and_payload(redeem_script)
            if script_type != "p2wpkh":
                raise InvalidOperationError(f"unsupported p2sh input {i}")
            return "p2wpkh-p2sh", payload
        if script_type not in ("p2pkh", "p2wpkh"):
            raise InvalidOperationError(f"unsupported {script_type} input {i}")
        return script_type, payload

    def _signature(
        self,
        index: int,
        key_pair: KeyPair,
        sighash_types: Optional[Sequence[int]] = None,
    ) -> Tuple[bytes, bytes]:
        "Return public key and signature for the input, without storing them."

        if not 0 <= index < len(self.psbt.inputs):
            raise InvalidOperationError(f"invalid input index: {index}")
        if key_pair.prv_key is None:
            raise InvalidOperationError("public-only key pair")

        psbt_in = self.psbt.inputs[index]
        hash_type = hash_type_for_input(psbt_in.sig_hash_type, sighash_types)
        script_type, h160 = self._script_type(index)
        pub_key = key_pair.pub_key.key
        if hash160(pub_key) != h160:
            raise InvalidOperationError(f"key mismatch for input {index}")

        tx: Tx = self.psbt.tx
        script_code = serialize(
            ["OP_DUP", "OP_HASH160", h160, "OP_EQUALVERIFY", "OP_CHECKSIG"]
        )
        if script_type == "p2pkh":
            msg_hash = sig_hash.legacy(script_code, tx, index, hash_type)
        else:
            amount = self._prevout(index).value
            msg_hash = sig_hash.segwit_v0(script_code, tx, index, hash_type, amount)

        sig = dsa.sign_(msg_hash, key_pair.prv_key)
        return pub_key, sig.serialize() + bytes([hash_type])

    def _final_scripts(self, partial_sigs: List[PartialSigs]) -> FinalScripts:
        missing = [i for i, sigs in enumerate(partial_sigs) if not sigs]
        if missing:
            raise InvalidOperationError(f"missing signatures for inputs: {missing}")

        finals: FinalScripts = []
        for i, sigs in enumerate(partial_sigs):
            script_type, _ = self._script_type(i)
            pub_key, sig = next(iter(sigs.items()))
            if script_type == "p2pkh":
                finals.append((serialize([sig, pub_key]), Witness()))
            elif script_type == "p2wpkh":
                finals.append((b"", Witness([sig, pub_key])))
            else:
                redeem_script = self.psbt.inputs[i].redeem_script
                finals.append((serialize([redeem_script]), Witness([sig, pub_key])))
        return finals

    def _store_final_scripts(self, finals: FinalScripts) -> None:
        for psbt_in, (script_sig, witness) in zip(self.psbt.inputs, finals):
            psbt_in.final_script_sig = script_sig
            psbt_in.final_script_witness = witness
            psbt_in.partial_sigs = {}
            psbt_in.sig_hash_type = None
            psbt_in.redeem_script = b""
            psbt_in.witness_script = b""
            psbt_in.hd_key_paths = {}

    def sign_input(
        self,
        index: int,
        key_pair: KeyPair,
        sighash_types: Optional[Sequence[int]] = None,
    ) -> None:
        self._assert_not_finalized()
        pub_key, sig = self._signature(index, key_pair, sighash_types)
        self.psbt.inputs[index].partial_sigs[pub_key] = sig

    def finalize_all_inputs(self) -> None:
        self._assert_not_finalized()
        finals = self._final_scripts([x.partial_sigs for x in self.psbt.inputs])
        self._store_final_scripts(finals)

    def sign_and_finalize(self, requests: Sequence[SignRequest]) -> None:
        """Sign the requested inputs, then finalize all inputs.

        Signatures and final scripts are all computed
        before any input is updated: on failure the psbt is left untouched.
        """

        self._assert_not_finalized()
        partial_sigs = [dict(x.partial_sigs) for x in self.psbt.inputs]
        for request in requests:
            pub_key, sig = self._signature(*request)
            partial_sigs[request.index][pub_key] = sig
        self._store_final_scripts(self._final_scripts(partial_sigs))

    @property
    def partial_sigs(self) -> List[PartialSigs]:
        return [psbt_in.partial_sigs for psbt_in in self.psbt.inputs]

    def extract_tx(self) -> Tx:
        "Return the network serialized transaction of the finalized psbt."
        if not self.finalized:
            raise InvalidOperationError("psbt not finalized")
        return extract_tx(self.psbt)
