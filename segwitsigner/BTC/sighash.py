"""Transaction digest for version 0 witness inputs, https://github.com/bitcoin/bips/blob/master/bip-0143.mediawiki#specification

Only SIGHASH_ALL is supported: every input and every output is committed to.
"""

from logging import getLogger
from typing import Union

from segwitsigner import message
from segwitsigner.transformations import hash160, hash256, bytes_to_hex
from segwitsigner.ECDSA.secp256k1 import PublicKey
from segwitsigner.BTC.opcodes import SIGHASH
from segwitsigner.BTC.script import serialize, pad, p2pkh_script
from segwitsigner.BTC.transaction import Transaction, Output
from segwitsigner.BTC.error import InputIndexOutOfRange, SigningError

LOGGER = getLogger(__name__)

concat = b''.join

PreviousValue = Union[int, Output, Transaction]


def _check_index(tx: Transaction, i: int):
    if not isinstance(i, int) or not 0 <= i < len(tx.inputs):
        raise InputIndexOutOfRange(i, len(tx.inputs), tx=tx)


def previous_value(tx: Transaction, i: int, value: PreviousValue) -> int:
    """Amount of the output spent by the i-th input, given directly or through the output or transaction holding it"""
    _check_index(tx, i)
    if isinstance(value, bool):
        raise TypeError('The previous value must be an amount, an Output or a Transaction')
    if isinstance(value, int):
        amount = value
    elif isinstance(value, Output):
        amount = value.value
    elif isinstance(value, Transaction):
        inp = tx.inputs[i]
        if value.txid()[::-1] != inp.output:
            raise SigningError(f'Input {i} does not spend an output of the given transaction', tx=tx)
        if inp.index >= len(value.outputs):
            raise SigningError(f'Input {i} spends output {inp.index} which does not exist', tx=tx)
        amount = value.outputs[inp.index].value
    else:
        raise TypeError('The previous value must be an amount, an Output or a Transaction')
    if not 0 <= amount <= 0xffffffffffffffff:
        raise ValueError(f'Invalid amount: {amount}')
    return amount


def p2wpkh_script_code(public_key: Union[PublicKey, bytes]) -> bytes:
    """OP_DUP OP_HASH160 <hash160(pubkey)> OP_EQUALVERIFY OP_CHECKSIG"""
    key = public_key.encode(compressed=True) if isinstance(public_key, PublicKey) else bytes(public_key)
    return p2pkh_script(hash160(key))


def hash_prevouts(tx: Transaction) -> bytes:
    return hash256(concat(inp.outpoint() for inp in tx.inputs))


def hash_sequence(tx: Transaction) -> bytes:
    return hash256(concat(inp._sequence[::-1] for inp in tx.inputs))


def hash_outputs(tx: Transaction) -> bytes:
    return hash256(concat(out.serialize() for out in tx.outputs))


def signature_form(tx: Transaction, i: int, script_code, value: PreviousValue) -> bytes:
    """The preimage whose double SHA256 is signed for the i-th input"""
    _check_index(tx, i)
    if isinstance(script_code, message.Message):
        script_code = script_code.bytes()
    amount = previous_value(tx, i, value)
    inp = tx.inputs[i]

    nversion = tx._version[::-1]
    outpoint = inp.outpoint()
    scriptcode = serialize(bytes(script_code))
    amount = pad(amount, 8)[::-1]
    nsequence = inp._sequence[::-1]
    nlocktime = tx._lock_time[::-1]
    sighash = pad(SIGHASH.ALL.value, 4)[::-1]

    return concat([
        nversion, hash_prevouts(tx), hash_sequence(tx), outpoint, scriptcode,
        amount, nsequence, hash_outputs(tx), nlocktime, sighash
    ])


def compute_sighash(tx: Transaction, i: int, script_code, value: PreviousValue) -> bytes:
    digest = hash256(signature_form(tx, i, script_code, value))
    LOGGER.debug('Signature hash for input %d of %d: %s', i, len(tx.inputs), bytes_to_hex(digest))
    return digest
