# Copyright (c) 2017 Pieter Wuille
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

"""Bech32 segwit addresses, https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki

Only version 0 programs are produced here, decoding accepts any version.
"""

from typing import List, Tuple

from segwitsigner.BTC.error import Bech32DecodeError

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
GENERATOR = (0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3)
MAX_LENGTH = 90


def polymod(values: List[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1ffffff) << 5 ^ value
        for i, gen in enumerate(GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def hrp_expand(hrp: str) -> List[int]:
    high = [ord(x) >> 5 for x in hrp]
    low = [ord(x) & 31 for x in hrp]
    return high + [0] + low


def checksum(hrp: str, data: List[int]) -> List[int]:
    mod = polymod(hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(mod >> 5 * (5 - i)) & 31 for i in range(6)]


def encode_raw(hrp: str, data: List[int]) -> str:
    return hrp + '1' + ''.join(CHARSET[d] for d in data + checksum(hrp, data))


def decode_raw(bech: str) -> Tuple[str, List[int]]:
    if any(not 33 <= ord(x) <= 126 for x in bech):
        raise Bech32DecodeError('Character outside the US-ASCII [33-126] range')
    if bech.lower() != bech and bech.upper() != bech:
        raise Bech32DecodeError('Mixed upper and lower case')
    if len(bech) > MAX_LENGTH:
        raise Bech32DecodeError('Max string length exceeded')

    bech = bech.lower()
    hrp, sep, payload = bech.rpartition('1')
    if not sep:
        raise Bech32DecodeError('No separator character')
    if not hrp:
        raise Bech32DecodeError('Empty human readable part')
    if len(payload) < 6:
        raise Bech32DecodeError('Checksum too short')
    if any(x not in CHARSET for x in payload):
        raise Bech32DecodeError('Character not in charset')

    data = [CHARSET.index(x) for x in payload]
    if polymod(hrp_expand(hrp) + data) != 1:
        raise Bech32DecodeError('Invalid checksum')
    return hrp, data[:-6]


def convertbits(data, frombits: int, tobits: int, pad=True) -> List[int]:
    """Regroup a sequence of frombits-wide values into tobits-wide values"""
    acc, bits, result = 0, 0, []
    maxv = (1 << tobits) - 1
    for value in data:
        if value < 0 or value >> frombits:
            raise Bech32DecodeError(f'Value {value} does not fit in {frombits} bits')
        acc = (acc << frombits) | value
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            result.append((acc >> bits) & maxv)
    if pad and bits:
        result.append((acc << (tobits - bits)) & maxv)
    elif not pad and (bits >= frombits or (acc << (tobits - bits)) & maxv):
        raise Bech32DecodeError('Invalid padding')
    return result


def decode(hrp: str, addr: str) -> Tuple[int, bytes]:
    """Witness version and program of a segwit address"""
    got, data = decode_raw(addr)
    if got != hrp:
        raise Bech32DecodeError(f'Human readable part mismatch: expected {hrp!r}, got {got!r}')
    if not data:
        raise Bech32DecodeError('Missing witness version')

    version, program = data[0], bytes(convertbits(data[1:], 5, 8, pad=False))
    if version > 16:
        raise Bech32DecodeError('Invalid witness version')
    if not 2 <= len(program) <= 40:
        raise Bech32DecodeError(f'Invalid witness program length: {len(program)}')
    if version == 0 and len(program) not in (20, 32):
        raise Bech32DecodeError('A version 0 program is either 20 or 32 bytes long')
    return version, program


def encode(hrp: str, version: int, program: bytes) -> str:
    return encode_raw(hrp, [version] + convertbits(program, 8, 5))
