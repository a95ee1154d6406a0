from typing import List, Optional, Tuple

from segwitsigner.transformations import bytes_to_hex, hex_to_bytes, int_to_le, le_to_int
from segwitsigner.BTC.opcodes import OP
from segwitsigner.BTC.error import ScriptValidationError

Instruction = Tuple[int, Optional[bytes]]


def op_push(i: int) -> bytes:
    """https://en.bitcoin.it/wiki/Script#Constants"""
    if i < 0x4c:
        return bytes([i])
    elif i <= 0xff:
        return OP.PUSHDATA1.byte + int_to_le(i, 1)
    elif i <= 0xffff:
        return OP.PUSHDATA2.byte + int_to_le(i, 2)
    else:
        return OP.PUSHDATA4.byte + int_to_le(i, 4)


def var_int(n):
    if n < 0xfd:
        return bytes([n])
    elif n <= 0xffff:
        return b'\xfd' + int_to_le(n, 2)
    elif n <= 0xffffffff:
        return b'\xfe' + int_to_le(n, 4)
    elif n <= 0xffffffffffffffff:
        return b'\xff' + int_to_le(n, 8)
    else:
        raise ValueError('Data too long for var_int')


def serialize(bts):
    """Length prefixed byte string as found in transactions and witnesses"""
    return var_int(len(bts)) + bts


def push(script: bytes) -> bytes:
    """Script opcode(s) pushing the given data onto the stack"""
    return op_push(len(script)) + script


def push_int(n: int) -> bytes:
    """Minimal encoding of a small positive number, OP_1..OP_16 or a single byte push above that"""
    if 0 <= n <= 16:
        return OP.small_int(n).byte
    assert 0 < n <= 0x7f, 'Only numbers up to 127 are supported'
    return push(bytes([n]))


def instructions(script: bytes) -> List[Instruction]:
    """Split a script into (opcode, data) pairs, data is None for non push opcodes"""
    result = []
    i = 0
    while i < len(script):
        opcode = script[i]
        i += 1
        if 0 < opcode < OP.PUSHDATA1.value:
            size = opcode
        elif opcode in (OP.PUSHDATA1.value, OP.PUSHDATA2.value, OP.PUSHDATA4.value):
            width = {OP.PUSHDATA1.value: 1, OP.PUSHDATA2.value: 2, OP.PUSHDATA4.value: 4}[opcode]
            if i + width > len(script):
                raise ScriptValidationError('Script ends inside a PUSHDATA length')
            size = le_to_int(script[i:i + width])
            i += width
        else:
            result.append((opcode, None))
            continue
        if i + size > len(script):
            raise ScriptValidationError('Script too short')
        result.append((opcode, script[i:i + size]))
        i += size
    return result


def read_number(instruction: Instruction) -> Optional[int]:
    """Value of a small number instruction: OP_1..OP_16 or a short little endian push"""
    opcode, data = instruction
    if data is None:
        if OP._1.value <= opcode <= OP._16.value:
            return opcode - 0x50
        return None
    if 0 < len(data) <= 4:
        return le_to_int(data)
    return None


def asm(script):
    """Turns a script into a symbolic representation"""
    if isinstance(script, str):
        script = hex_to_bytes(script)

    results = []
    for opcode, data in instructions(script):
        if data is not None:
            results.append(bytes_to_hex(data))
            continue
        try:
            results.append(str(OP(opcode)))
        except ValueError:
            results.append(f'OP_UNKNOWN[0x{opcode:02x}]')

    return ' '.join(results)


def is_witness_program(script):
    """https://github.com/bitcoin/bitcoin/blob/5961b23898ee7c0af2626c46d5d70e80136578d3/src/script/script.cpp#L221"""
    if len(script) < 4 or len(script) > 42:
        return False
    if script[0] != OP._0.value and (script[0] < OP._1.value or script[0] > OP._16.value):
        return False
    if script[1] + 2 != len(script):
        return False
    return True


def witness_program(script):
    if not is_witness_program(script):
        raise ScriptValidationError("Script is not a witness program")
    return script[2:]


def version_byte(script):
    if not is_witness_program(script):
        raise ScriptValidationError("Script is not a witness program")
    return script[0]


def p2pkh_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <hash> OP_EQUALVERIFY OP_CHECKSIG, the scriptCode of a P2WPKH input"""
    assert len(pubkey_hash) == 20, 'A public key hash is 20 bytes long'
    return OP.DUP.byte + OP.HASH160.byte + push(pubkey_hash) + OP.EQUALVERIFY.byte + OP.CHECKSIG.byte


def pad(val, bytelength):
    if isinstance(val, bytes):
        assert len(val) == bytelength, f"Value should be {bytelength} bytes long"
        return val
    elif isinstance(val, int):
        return int_to_le(val, bytelength)[::-1]
    else:
        raise TypeError('Value should be bytes or int')
