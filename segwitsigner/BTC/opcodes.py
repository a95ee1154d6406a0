from enum import Enum, unique


@unique
class SIGHASH(Enum):
    ALL = 0x01

    @property
    def byte(self) -> bytes:
        return bytes([self.value])


@unique
class TX(Enum):
    P2WPKH = 'P2WPKH'
    P2WSH = 'P2WSH'
    UNKNOWN = None

    def __repr__(self):
        return '<%s.%s>' % (self.__class__.__name__, self.name)


@unique
class OP(Enum):

    _0 = 0x00
    PUSHDATA1 = 0x4c
    PUSHDATA2 = 0x4d
    PUSHDATA4 = 0x4e
    _1NEGATE = 0x4f
    _1 = 0x51
    _2 = 0x52
    _3 = 0x53
    _4 = 0x54
    _5 = 0x55
    _6 = 0x56
    _7 = 0x57
    _8 = 0x58
    _9 = 0x59
    _10 = 0x5a
    _11 = 0x5b
    _12 = 0x5c
    _13 = 0x5d
    _14 = 0x5e
    _15 = 0x5f
    _16 = 0x60
    RETURN = 0x6a
    DUP = 0x76
    EQUAL = 0x87
    EQUALVERIFY = 0x88
    HASH160 = 0xa9
    CODESEPARATOR = 0xab
    CHECKSIG = 0xac
    CHECKSIGVERIFY = 0xad
    CHECKMULTISIG = 0xae
    CHECKMULTISIGVERIFY = 0xaf

    @property
    def byte(self) -> bytes:
        return bytes([self.value])

    @classmethod
    def small_int(cls, n: int) -> 'OP':
        """OP_0 .. OP_16"""
        assert 0 <= n <= 16, 'Only 0-16 have a dedicated opcode'
        return cls._0 if n == 0 else cls(0x50 + n)

    def __str__(self):
        s = super().__str__()
        return s.replace('.', '_').replace('__', '_')

    def __repr__(self):
        s = super().__repr__()
        return s.replace('.', '_').replace('__', '_')
