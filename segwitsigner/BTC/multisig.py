"""Multisignature redeem scripts, https://github.com/bitcoin/bips/blob/master/bip-0141.mediawiki#p2wsh"""

from logging import getLogger
from typing import List, NamedTuple, Sequence, Union

from segwitsigner import message
from segwitsigner.transformations import sha256, hash160, hex_to_bytes
from segwitsigner.ECDSA.secp256k1 import PublicKey
from segwitsigner.BTC.opcodes import OP
from segwitsigner.BTC.script import push, push_int, instructions, read_number, asm
from segwitsigner.BTC.error import (
    InvalidThreshold, TooManyKeys, DuplicateKey, NotStandard, InvalidKey, ScriptValidationError
)

LOGGER = getLogger(__name__)

# https://github.com/bitcoin/bitcoin/blob/v0.16.0/src/policy/policy.cpp#L42
MAX_STANDARD_KEYS = 15
# https://github.com/bitcoin/bitcoin/blob/v0.16.0/src/script/script.h#L30
MAX_PUBKEYS_PER_MULTISIG = 20

KeyLike = Union[PublicKey, bytes]


def _encode_key(key: KeyLike) -> bytes:
    if isinstance(key, PublicKey):
        return key.encode(compressed=True)
    if isinstance(key, (bytes, bytearray)):
        key = bytes(key)
        if len(key) != 33:
            raise InvalidKey(f'Public keys in a witness script must be 33 bytes long, got {len(key)}')
        PublicKey.decode(key)
        return key
    raise TypeError(f'Expected a PublicKey or bytes, got {type(key).__name__}')


class RedeemScriptContent(NamedTuple):
    public_keys: List[PublicKey]
    quorum: int


class RedeemScript(message.Message):
    """OP_m <pubkey_1> ... <pubkey_n> OP_n OP_CHECKMULTISIG

    Only standard scripts can be constructed, so content() never fails on an instance.
    """

    def __init__(self, script: bytes):
        script = bytes(script)
        self._content = self.parse(script)
        super().__init__(script)

    @staticmethod
    def parse(script: bytes) -> RedeemScriptContent:
        try:
            ops = instructions(script)
        except ScriptValidationError as e:
            raise NotStandard(str(e)) from None

        if not ops:
            raise NotStandard('Empty script')
        quorum = read_number(ops[0])
        if quorum is None:
            raise NotStandard('Script does not start with a quorum')

        public_keys = []
        position = 1
        # the key count may itself be a one byte push
        while position < len(ops) and ops[position][1] is not None and len(ops[position][1]) > 1:
            if len(ops[position][1]) != 33:
                raise NotStandard(f'Public key at position {position} is not compressed')
            try:
                public_keys.append(PublicKey.decode(ops[position][1]))
            except InvalidKey as e:
                raise NotStandard(f'Invalid public key at position {position}: {e}') from None
            position += 1

        if position >= len(ops):
            raise NotStandard('Script ends before the key count')
        count = read_number(ops[position])
        if count is None:
            raise NotStandard('Missing key count')
        if count != len(public_keys):
            raise NotStandard(f'Key count {count} does not match the {len(public_keys)} keys in the script')
        if count > MAX_PUBKEYS_PER_MULTISIG:
            raise NotStandard(f'More than {MAX_PUBKEYS_PER_MULTISIG} keys')
        if not 1 <= quorum <= count:
            raise NotStandard(f'Quorum {quorum} out of range for {count} keys')
        if ops[position + 1:] != [(OP.CHECKMULTISIG.value, None)]:
            raise NotStandard('Script must end with OP_CHECKMULTISIG')

        return RedeemScriptContent(public_keys=public_keys, quorum=quorum)

    @classmethod
    def from_hex(cls, hexstring: str) -> 'RedeemScript':
        try:
            script = hex_to_bytes(hexstring)
        except ValueError as e:
            raise NotStandard(f'Invalid hex: {e}') from None
        return cls(script)

    def content(self) -> RedeemScriptContent:
        return self._content

    @property
    def quorum(self) -> int:
        return self._content.quorum

    @property
    def public_keys(self) -> List[PublicKey]:
        return list(self._content.public_keys)

    def script_hash(self) -> bytes:
        return sha256(self.msg)

    def locking_script(self) -> bytes:
        return p2wsh_locking_script(self)

    def address(self, _network=None) -> str:
        from segwitsigner.BTC.address import p2wsh_address
        return p2wsh_address(self, _network=_network)

    def asm(self) -> str:
        return asm(self.msg)

    def __str__(self):
        return self.hex()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.quorum}-of-{len(self._content.public_keys)}, {self.hex()})"


class RedeemScriptBuilder:
    """Collects public keys and a quorum, then produces the canonical redeem script"""

    def __init__(self, public_keys: Sequence[KeyLike] = (), quorum: int = None):
        self.keys = list(public_keys)
        self.threshold = len(self.keys) if quorum is None else quorum

    def public_key(self, key: KeyLike) -> 'RedeemScriptBuilder':
        self.keys.append(key)
        return self

    def quorum(self, quorum: int) -> 'RedeemScriptBuilder':
        self.threshold = quorum
        return self

    def to_script(self) -> RedeemScript:
        return build_redeem_script(self.keys, self.threshold)


def build_redeem_script(public_keys: Sequence[KeyLike], threshold: int) -> RedeemScript:
    """Key order is kept exactly as given, reordering the keys gives a different script and address"""
    if not public_keys:
        raise InvalidThreshold('At least one public key is required')
    if not 1 <= threshold <= len(public_keys):
        raise InvalidThreshold(f'Threshold must be between 1 and {len(public_keys)}, got {threshold}')
    if len(public_keys) > MAX_STANDARD_KEYS:
        raise TooManyKeys(f'At most {MAX_STANDARD_KEYS} keys are allowed, got {len(public_keys)}')

    encoded = [_encode_key(key) for key in public_keys]
    seen = set()
    for position, key in enumerate(encoded):
        if key in seen:
            raise DuplicateKey(f'Public key at position {position} appears more than once')
        seen.add(key)

    script = push_int(threshold) + b''.join(push(key) for key in encoded) + push_int(len(encoded)) + OP.CHECKMULTISIG.byte
    LOGGER.debug('Built %d-of-%d redeem script %s', threshold, len(encoded), sha256(script).hex())
    return RedeemScript(script)


def _script_bytes(script) -> bytes:
    return script.bytes() if isinstance(script, message.Message) else bytes(script)


def p2wsh_locking_script(redeem_script: Union[RedeemScript, bytes]) -> bytes:
    """OP_0 <sha256(script)>"""
    return OP._0.byte + push(sha256(_script_bytes(redeem_script)))


def p2wpkh_locking_script(public_key: KeyLike) -> bytes:
    """OP_0 <hash160(pubkey)>"""
    return OP._0.byte + push(hash160(_encode_key(public_key)))
