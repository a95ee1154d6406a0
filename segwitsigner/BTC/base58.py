from segwitsigner.transformations import bytes_to_int, int_to_bytes, hash256

ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'
BASE = len(ALPHABET)


class Base58DecodeError(Exception):
    pass


def encode(bts: bytes) -> str:
    n = bytes_to_int(bts) if bts else 0
    leading_zero_bytes = len(bts) - len(bts.lstrip(b'\x00'))
    int_digits = []
    while n:
        int_digits.append(n % BASE)
        n //= BASE
    int_digits.extend([0] * leading_zero_bytes)
    return ''.join(ALPHABET[i] for i in reversed(int_digits))


def decode(b58: str) -> bytes:
    n = 0
    for digit in b58:
        try:
            n = n * BASE + ALPHABET.index(digit)
        except ValueError:
            raise Base58DecodeError(f'Bad character: {digit!r}') from None
    leading_zero_bytes = len(b58) - len(b58.lstrip(ALPHABET[0]))
    body = int_to_bytes(n) if n else b''
    return b'\x00' * leading_zero_bytes + body


def encode_check(payload: bytes) -> str:
    return encode(payload + hash256(payload)[:4])


def decode_check(b58: str) -> bytes:
    bts = decode(b58)
    payload, checksum = bts[:-4], bts[-4:]
    if len(bts) < 5 or hash256(payload)[:4] != checksum:
        raise Base58DecodeError('Invalid Checksum')
    return payload
