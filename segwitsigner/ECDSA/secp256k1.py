import hmac
import hashlib
import secrets
from typing import Union

from segwitsigner import message
from segwitsigner import ECDSA
from segwitsigner.number_theory_stuff import mulinv, modsqrt
from segwitsigner.transformations import int_to_bytes, bytes_to_int, bytes_to_hex, hex_to_bytes
from segwitsigner.BTC.error import InvalidKey, SignatureDecodeError

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

# Generator
G = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798, 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

# Order
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

CURVE = ECDSA.Curve(P, 0, 7, G, N, name='secp256k1')


class Point(ECDSA.AbstractPoint):

    def __init__(self, x, y):
        super().__init__(x, y, CURVE)


CURVE.Point = Point


def rfc6979(secret: int, digest: bytes):
    """Candidate nonces for a (key, digest) pair, https://tools.ietf.org/html/rfc6979#section-3.2

    The caller takes candidates until one yields a usable signature; only the
    first one is needed in practice.
    """
    x = int_to_bytes(secret, 32)
    h = int_to_bytes(bytes_to_int(digest) % N, 32)

    def mac(key, data):
        return hmac.new(key, data, hashlib.sha256).digest()

    v = b'\x01' * 32
    k = b'\x00' * 32
    k = mac(k, v + b'\x00' + x + h)
    v = mac(k, v)
    k = mac(k, v + b'\x01' + x + h)
    v = mac(k, v)

    while True:
        v = mac(k, v)
        candidate = bytes_to_int(v)
        if 1 <= candidate < N:
            yield candidate
        k = mac(k, v + b'\x00')
        v = mac(k, v)


class PrivateKey(message.Message):

    def __init__(self, bts, compressed=True, _network=None):
        if len(bts) > 32:
            raise InvalidKey('A private key is at most 32 bytes long')
        bts = bts.rjust(32, b'\x00')
        if not 0 < bytes_to_int(bts) < N:
            raise InvalidKey('Private key must be in the range [1, N)')
        super().__init__(bts)
        self.compressed = compressed
        self.network = _network

    @classmethod
    def random(cls, compressed=True, _network=None):
        key = 1 + secrets.randbelow(N - 1)
        return cls.from_int(key, compressed=compressed, _network=_network)

    @classmethod
    def from_wif(cls, wif: str) -> 'PrivateKey':
        from segwitsigner.BTC import base58
        from segwitsigner.BTC.network import network_from_wif_prefix
        try:
            bts = base58.decode_check(wif)
        except base58.Base58DecodeError as e:
            raise InvalidKey(f'Invalid WIF: {e}') from None
        network_byte, key = bts[0:1], bts[1:]
        try:
            _network = network_from_wif_prefix(network_byte)
        except ValueError as e:
            raise InvalidKey(str(e)) from None
        if len(key) == 33 and key.endswith(b'\x01'):
            return cls(key[:-1], compressed=True, _network=_network)
        if len(key) == 32:
            return cls(key, compressed=False, _network=_network)
        raise InvalidKey('Invalid WIF payload length')

    def wif(self, compressed=None, _network=None) -> str:
        from segwitsigner.BTC import base58
        from segwitsigner.BTC.network import network
        compressed = self.compressed if compressed is None else compressed
        extended = network('wif', _network or self.network) + self.bytes() + (b'\x01' if compressed else b'')
        return base58.encode_check(extended)

    def to_public(self) -> 'PublicKey':
        point = CURVE.G * self.int()
        return PublicKey(point)

    def __repr__(self):
        return f"PrivateKey(<hidden>, compressed={self.compressed})"

    def __eq__(self, other):
        return isinstance(other, PrivateKey) and self.msg == other.msg

    __hash__ = message.Message.__hash__

    def sign_hash(self, hash: bytes) -> 'Signature':
        """Deterministic ECDSA signature of a 32 byte digest, s is always in the lower half of the order"""
        if len(hash) != 32:
            raise ValueError(f'Only 32 byte digests can be signed, got {len(hash)} bytes')
        e = bytes_to_int(hash)
        d = self.int()
        for k in rfc6979(d, hash):
            r = (CURVE.G * k).x % N
            if r == 0:
                continue
            s = (mulinv(k, N) * (e + r * d)) % N
            if s == 0:
                continue
            return Signature(r=r, s=s)


class PublicKey:

    def __init__(self, point: Point):
        self.point = point

    def __eq__(self, other: 'PublicKey') -> bool:
        return isinstance(other, PublicKey) and self.point == other.point

    def __hash__(self):
        return hash(self.point)

    def __repr__(self) -> str:
        return f"PublicKey({self.hex()})"

    @classmethod
    def decode(cls, key: bytes) -> 'PublicKey':
        try:
            return cls._decode(key)
        except AssertionError as e:
            raise InvalidKey(str(e)) from None

    @classmethod
    def _decode(cls, key: bytes) -> 'PublicKey':
        assert key, 'Empty public key'
        if key.startswith(b'\x04'):        # uncompressed key
            assert len(key) == 65, 'An uncompressed public key must be 65 bytes long'
            x, y = bytes_to_int(key[1:33]), bytes_to_int(key[33:])
        else:                              # compressed key
            assert len(key) == 33, 'A compressed public key must be 33 bytes long'
            x = bytes_to_int(key[1:])
            assert x < P, 'x coordinate out of range'
            root = modsqrt(CURVE.f(x), P)
            if key.startswith(b'\x03'):    # odd root
                y = root if root % 2 == 1 else -root % P
            elif key.startswith(b'\x02'):  # even root
                y = root if root % 2 == 0 else -root % P
            else:
                assert False, 'Wrong key format'
        return cls(Point(x, y))

    @classmethod
    def from_hex(cls, hexstring: str) -> 'PublicKey':
        return cls.decode(hex_to_bytes(hexstring))

    @property
    def x(self) -> int:
        """X coordinate of the (X, Y) point"""
        return self.point.x

    @property
    def y(self) -> int:
        """Y coordinate of the (X, Y) point"""
        return self.point.y

    def encode(self, compressed=True) -> bytes:
        if compressed:
            if self.y & 1:  # odd root
                return b'\x03' + int_to_bytes(self.x, 32)
            else:           # even root
                return b'\x02' + int_to_bytes(self.x, 32)
        return b'\x04' + int_to_bytes(self.x, 32) + int_to_bytes(self.y, 32)

    def hex(self, compressed=True) -> str:
        return bytes_to_hex(self.encode(compressed=compressed))


def generate_keypair(compressed=True, _network=None):
    private = PrivateKey.random(compressed=compressed, _network=_network)
    public = private.to_public()
    return private, public


class Signature:

    def __init__(self, r, s, force_low_s=True):
        self.r = r

        if force_low_s:
            # https://github.com/bitcoin/bips/blob/master/bip-0062.mediawiki#low-s-values-in-signatures
            self.s = s if s <= CURVE.N // 2 else CURVE.N - s
        else:
            self.s = s

    def is_low_s(self) -> bool:
        return self.s <= CURVE.N // 2

    @classmethod
    def decode(cls, bts: bytes) -> 'Signature':
        """Strict DER decoding, https://github.com/bitcoin/bips/blob/master/bip-0066.mediawiki#der-encoding-reference

        The s value is kept as encoded so that high-S signatures can be told apart.
        """
        try:
            return cls._decode(bytes(bts))
        except (AssertionError, IndexError) as e:
            raise SignatureDecodeError(str(e) or 'Truncated signature') from None

    @classmethod
    def _decode(cls, bts: bytes) -> 'Signature':
        assert 8 <= len(bts) <= 72, f'Invalid signature length: {len(bts)}'
        assert bts[0] == 0x30, f'Invalid leading byte: 0x{bts[0]:x}'  # ASN1 SEQUENCE
        assert bts[1] == len(bts) - 2, f'Invalid Sequence length: {bts[1]}'

        len_r = bts[3]
        assert 5 + len_r < len(bts), f'Invalid r length: {len_r}'
        len_s = bts[5 + len_r]
        assert len_r + len_s + 6 == len(bts), f'Invalid s length: {len_s}'

        r_bytes, s_bytes = bts[4:4 + len_r], bts[6 + len_r:]
        for name, lead, value in (('r', bts[2], r_bytes), ('s', bts[4 + len_r], s_bytes)):
            assert lead == 0x02, f'Invalid {name} leading byte: 0x{lead:x}'  # 0x02 byte before r and s
            assert value, f'Zero length {name}'
            assert not value[0] & 0x80, f'Negative {name}'
            assert not (len(value) > 1 and value[0] == 0 and not value[1] & 0x80), f'Excess padding in {name}'

        return cls(bytes_to_int(r_bytes), bytes_to_int(s_bytes), force_low_s=False)

    @classmethod
    def from_compact(cls, bts: bytes) -> 'Signature':
        if len(bts) != 64:
            raise SignatureDecodeError('A compact signature must be 64 bytes long')
        return cls(bytes_to_int(bts[:32]), bytes_to_int(bts[32:]), force_low_s=False)

    def encode(self):
        """https://github.com/bitcoin/bips/blob/master/bip-0062.mediawiki#der-encoding"""
        r = int_to_bytes(self.r)
        if r[0] > 0x7f:
            r = b'\x00' + r
        s = int_to_bytes(self.s)
        if s[0] > 0x7f:
            s = b'\x00' + s

        len_r = int_to_bytes(len(r))
        len_s = int_to_bytes(len(s))
        len_sig = int_to_bytes(len(r) + len(s) + 4)
        return b'\x30' + len_sig + b'\x02' + len_r + r + b'\x02' + len_s + s

    def compact(self) -> bytes:
        return int_to_bytes(self.r, 32) + int_to_bytes(self.s, 32)

    def verify_hash(self, hash: bytes, pubkey: PublicKey) -> bool:

        if not (1 <= self.r < CURVE.N and 1 <= self.s < CURVE.N):
            return False

        e = bytes_to_int(hash)
        w = mulinv(self.s, CURVE.N)
        u1 = (e * w) % CURVE.N
        u2 = (self.r * w) % CURVE.N

        point = CURVE.G * u1 + pubkey.point * u2
        if point.is_inf():
            return False
        return self.r % CURVE.N == point.x % CURVE.N

    @classmethod
    def from_hex(cls, hexstring):
        return cls.decode(hex_to_bytes(hexstring))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.r}, {self.s})"

    def __eq__(self, other):
        return isinstance(other, Signature) and self.r == other.r and self.s == other.s

    def __hash__(self):
        return hash((self.r, self.s))

    def hex(self):
        return bytes_to_hex(self.encode())


RawSignature = Union[Signature, bytes]


def to_signature(raw: RawSignature, compact=False) -> Signature:
    """The only conversion into a Signature: an existing Signature, DER bytes or 64 compact bytes"""
    if isinstance(raw, Signature):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        if compact:
            return Signature.from_compact(bytes(raw))
        return Signature.decode(raw)
    raise TypeError(f'Cannot convert {type(raw).__name__} to a Signature')
