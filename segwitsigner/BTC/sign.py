from logging import getLogger, DEBUG
from typing import Mapping, Optional, Sequence, Tuple, Union

from segwitsigner import message
from segwitsigner.transformations import bytes_to_hex
from segwitsigner.ECDSA.secp256k1 import PrivateKey, PublicKey, Signature
from segwitsigner.BTC.opcodes import SIGHASH
from segwitsigner.BTC.multisig import RedeemScript
from segwitsigner.BTC.error import (
    ConfigurationError, SignatureCountExceedsKeys, NotEnoughSignatures, SignatureDecodeError, ScriptValidationError
)

LOGGER = getLogger(__name__)

Witness = Tuple[bytes, ...]


class InputSignature(message.Message):
    """A DER encoded signature followed by the sighash byte, as it appears on a witness stack"""

    def __init__(self, bts: bytes):
        bts = bytes(bts)
        if len(bts) < 2:
            raise SignatureDecodeError('Input signature is too short')
        if bts[-1] != SIGHASH.ALL.value:
            raise SignatureDecodeError(f'Unsupported sighash type: 0x{bts[-1]:02x}')
        self.signature = Signature.decode(bts[:-1])
        super().__init__(bts)

    @classmethod
    def from_signature(cls, signature: Signature) -> 'InputSignature':
        return cls(signature.encode() + SIGHASH.ALL.byte)

    def content(self) -> bytes:
        """The DER part, without the sighash byte"""
        return self.msg[:-1]

    @property
    def sighash(self) -> SIGHASH:
        return SIGHASH(self.msg[-1])

    def __repr__(self):
        return f"{self.__class__.__name__}({self.hex()})"


def _private_key(private) -> PrivateKey:
    if isinstance(private, PrivateKey):
        return private
    if isinstance(private, (bytes, bytearray)):
        return PrivateKey(bytes(private))
    raise TypeError(f'Expected a PrivateKey, got {type(private).__name__}')


def sign(private: Union[PrivateKey, bytes], digest: bytes) -> InputSignature:
    """Deterministic low-S signature of a digest, ready to be placed on a witness stack"""
    key = _private_key(private)
    signature = key.sign_hash(digest)
    if LOGGER.isEnabledFor(DEBUG):
        LOGGER.debug('Signed %s with key %s', bytes_to_hex(digest), key.to_public().hex())
    return InputSignature.from_signature(signature)


def sign_p2wpkh(private: Union[PrivateKey, bytes], digest: bytes) -> InputSignature:
    return sign(private, digest)


def sign_p2wsh_multisig(private: Union[PrivateKey, bytes], digest: bytes) -> InputSignature:
    return sign(private, digest)


def _raw(signature) -> bytes:
    if isinstance(signature, InputSignature):
        return signature.bytes()
    if isinstance(signature, Signature):
        return InputSignature.from_signature(signature).bytes()
    return InputSignature(signature).bytes()


def assemble_witness_p2wpkh(signature, public_key: Union[PublicKey, bytes]) -> Witness:
    """[sig|01, pubkey]"""
    key = public_key.encode(compressed=True) if isinstance(public_key, PublicKey) else bytes(public_key)
    return _raw(signature), key


def _redeem_script(redeem_script) -> RedeemScript:
    if isinstance(redeem_script, RedeemScript):
        return redeem_script
    return RedeemScript(redeem_script)


SignatureSlot = Optional[Union[InputSignature, Signature, bytes]]


def _slots(script: RedeemScript, signatures) -> list:
    keys = script.public_keys
    if isinstance(signatures, Mapping):
        slots = [None] * len(keys)
        for key, signature in signatures.items():
            if not isinstance(key, PublicKey):
                key = PublicKey.decode(bytes(key))
            if key not in keys:
                raise ConfigurationError(f'{key.hex()} is not part of the redeem script')
            slots[keys.index(key)] = signature
        return slots

    signatures = list(signatures)
    if len(signatures) > len(keys):
        raise SignatureCountExceedsKeys(f'{len(signatures)} signatures given for {len(keys)} public keys')
    return signatures + [None] * (len(keys) - len(signatures))


def assemble_witness_p2wsh(redeem_script, signatures: Union[Sequence[SignatureSlot], Mapping]) -> Witness:
    """[b'', slot_1, ..., slot_n, redeem_script]

    Signatures are given per public key, in script order, or as a mapping from public key to signature.
    Keys that have not signed get an empty slot.
    """
    script = _redeem_script(redeem_script)
    slots = [b'' if not slot else _raw(slot) for slot in _slots(script, signatures)]
    LOGGER.debug('Assembled witness with %d of %d signatures (quorum %d)',
                 sum(1 for slot in slots if slot), len(slots), script.quorum)
    return (b'', *slots, script.bytes())


def finalize_witness_p2wsh(witness: Sequence[bytes], redeem_script=None) -> Witness:
    """Drop empty slots and surplus signatures, leaving the quorum of signatures OP_CHECKMULTISIG consumes"""
    if len(witness) < 2:
        raise ScriptValidationError('A multisig witness holds at least the dummy element and the script')
    script = _redeem_script(witness[-1] if redeem_script is None else redeem_script)
    if bytes(witness[-1]) != script.bytes():
        raise ScriptValidationError('Witness script does not match the redeem script')

    signatures = [bytes(item) for item in witness[1:-1] if item]
    if len(signatures) < script.quorum:
        raise NotEnoughSignatures(f'{len(signatures)} signatures present, {script.quorum} required')
    return (b'', *signatures[:script.quorum], script.bytes())
