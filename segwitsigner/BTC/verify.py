"""Signature and witness checks. Every failure is reported as False, nothing here raises on bad input."""

from logging import getLogger
from typing import Optional, Sequence, Union

from segwitsigner.transformations import bytes_to_hex
from segwitsigner.ECDSA.secp256k1 import PublicKey, Signature, RawSignature, to_signature
from segwitsigner.BTC.multisig import RedeemScript, p2wsh_locking_script, p2wpkh_locking_script
from segwitsigner.BTC.sign import InputSignature
from segwitsigner.BTC.error import InvalidKey, SignatureDecodeError, NotStandard

LOGGER = getLogger(__name__)


def _verify(public_key: PublicKey, digest: bytes, signature: Signature) -> bool:
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
        return False
    # https://github.com/bitcoin/bips/blob/master/bip-0146.mediawiki#low_s
    if not signature.is_low_s():
        return False
    return signature.verify_hash(digest, public_key)


def verify(public_key: Union[PublicKey, bytes], digest: bytes, signature: Union[RawSignature, InputSignature]) -> bool:
    """Check a DER (or compact, or already decoded) signature against a digest"""
    try:
        if not isinstance(public_key, PublicKey):
            public_key = PublicKey.decode(bytes(public_key))
        if isinstance(signature, InputSignature):
            signature = signature.signature
        signature = to_signature(signature)
    except (InvalidKey, SignatureDecodeError, TypeError):
        return False
    return _verify(public_key, digest, signature)


def _input_signature(item: bytes) -> Optional[Signature]:
    try:
        return InputSignature(item).signature
    except SignatureDecodeError:
        return None


def verify_witness_p2wpkh(witness: Sequence[bytes], expected_locking_script: bytes, digest: bytes) -> bool:
    if len(witness) != 2:
        LOGGER.debug('P2WPKH witness must have 2 items, got %d', len(witness))
        return False
    raw_signature, raw_key = witness
    try:
        public_key = PublicKey.decode(bytes(raw_key))
    except InvalidKey:
        return False
    if len(raw_key) != 33 or p2wpkh_locking_script(bytes(raw_key)) != bytes(expected_locking_script):
        LOGGER.debug('Public key %s does not match the locking script', bytes_to_hex(bytes(raw_key)))
        return False
    signature = _input_signature(raw_signature)
    if signature is None:
        return False
    valid = _verify(public_key, digest, signature)
    LOGGER.debug('P2WPKH witness for %s valid: %s', public_key.hex(), valid)
    return valid


def _matches_in_order(keys, signatures, digest) -> int:
    """OP_CHECKMULTISIG style pass, every signature is tried against the keys after the previous match"""
    matched = 0
    position = 0
    for item in signatures:
        signature = _input_signature(item)
        if signature is None:
            return 0
        while position < len(keys) and not _verify(keys[position], digest, signature):
            position += 1
        if position == len(keys):
            LOGGER.debug('Signature %s matches no remaining public key', bytes_to_hex(bytes(item)))
            return 0
        matched += 1
        position += 1
    return matched


def _matches_by_slot(keys, slots, digest) -> int:
    """Slot i holds the signature of key i or nothing"""
    matched = 0
    for key, item in zip(keys, slots):
        if not item:
            continue
        signature = _input_signature(item)
        if signature is None or not _verify(key, digest, signature):
            LOGGER.debug('Slot for %s does not hold a valid signature', key.hex())
            return 0
        matched += 1
    return matched


def verify_witness_p2wsh(witness: Sequence[bytes], redeem_script, digest: bytes, locking_script: bytes = None) -> bool:
    """Accepts the partial form (one slot per public key, empty when unsigned) and the final form
    (exactly quorum signatures, in public key order, each one matching a different key).
    """
    try:
        script = redeem_script if isinstance(redeem_script, RedeemScript) else RedeemScript(bytes(redeem_script))
    except NotStandard:
        return False
    if len(witness) < 2 or witness[0] != b'':
        LOGGER.debug('Multisig witness must start with an empty element')
        return False
    if bytes(witness[-1]) != script.bytes():
        LOGGER.debug('Witness script does not match the redeem script')
        return False
    if locking_script is not None and p2wsh_locking_script(script) != bytes(locking_script):
        LOGGER.debug('Redeem script does not hash to the locking script')
        return False

    keys = script.public_keys
    slots = witness[1:-1]
    if len(slots) == len(keys):
        matched = _matches_by_slot(keys, slots, digest)
    elif len(slots) == script.quorum:
        matched = _matches_in_order(keys, [item for item in slots if item], digest)
    else:
        LOGGER.debug('Witness has %d slots, expected %d or %d', len(slots), len(keys), script.quorum)
        return False

    valid = matched >= script.quorum
    LOGGER.debug('P2WSH witness has %d valid signatures, %d required', matched, script.quorum)
    return valid
