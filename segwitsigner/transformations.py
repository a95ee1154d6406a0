"""Helper Functions to convert between data types"""

import hashlib

__all__ = [
    'sha256', 'ripemd160', 'hash160', 'hash256',
    'bytes_to_int', 'int_to_bytes', 'hex_to_int',
    'bytes_to_hex', 'hex_to_bytes', 'int_to_le', 'le_to_int',
]

sha256 = lambda x: hashlib.sha256(x).digest()
ripemd160 = lambda x: hashlib.new('ripemd160', x).digest()
hash160 = lambda x: ripemd160(sha256(x))
hash256 = lambda x: sha256(sha256(x))


def bytes_to_int(bts):
    return int.from_bytes(bts, 'big')


def int_to_bytes(i, length=None):
    if length is None:
        length = max(1, (i.bit_length() + 7) // 8)
    return i.to_bytes(length, 'big')


def int_to_le(i, length):
    """Fixed width little endian encoding used by every integer field of a transaction"""
    return i.to_bytes(length, 'little')


def le_to_int(bts):
    return int.from_bytes(bts, 'little')


def hex_to_int(h):
    return int(h, 16)


def bytes_to_hex(b):
    return b.hex()


def hex_to_bytes(h):
    return bytes.fromhex(h)
