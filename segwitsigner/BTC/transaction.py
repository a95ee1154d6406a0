from copy import copy
from collections import deque

from segwitsigner.transformations import bytes_to_int, bytes_to_hex, hex_to_bytes, hash256
from segwitsigner.BTC.opcodes import TX
from segwitsigner.BTC.script import asm, pad, var_int, serialize, is_witness_program
from segwitsigner.BTC.error import SerializationError


concat = b''.join


class Input:
    def __init__(self, output, index, script=b'', sequence=b'\xff\xff\xff\xff', witness=None):
        # Parameters should be bytes as transmitted i.e reversed
        assert isinstance(output, bytes) and len(output) == 32
        self.output = output[::-1]  # referenced tx hash
        self.index = index if isinstance(index, int) else bytes_to_int(index[::-1])
        assert self.index <= 0xffffffff
        self.script = script
        self.sequence = sequence if isinstance(sequence, int) else sequence[::-1]
        self.witness = witness
        self.tx_index = None  # index of this input in it's parent tx

    @property
    def segwit(self):
        return bool(self.witness)

    @property
    def sequence(self):
        return bytes_to_int(self._sequence)

    @sequence.setter
    def sequence(self, x):
        self._sequence = pad(x, 4)

    @property
    def index(self):
        return bytes_to_int(self._index)

    @index.setter
    def index(self, x):
        self._index = pad(x, 4)

    def serialize(self):
        return self.output[::-1] + self._index[::-1] + serialize(self.script) + self._sequence[::-1]

    def serialize_witness(self):
        if not self.segwit:
            return b'\x00'
        result = var_int(len(self.witness))
        for stack_item in self.witness:
            result += serialize(stack_item)
        return result

    def outpoint(self):
        """The 36 byte txid + output index pair identifying the spent output"""
        return self.output[::-1] + self._index[::-1]

    def clear(self):
        self.script = b''
        self.witness = tuple()

    def __repr__(self):
        return f"{self.__class__.__name__}(from={bytes_to_hex(self.output)}, index={self.index})"

    def json(self):
        result = {
            "txid": bytes_to_hex(self.output),
            "vout": self.index,
            "scriptSig": {
                "hex": bytes_to_hex(self.script)
            }
        }
        if self.segwit:
            result['witness'] = [bytes_to_hex(wit) for wit in self.witness]
        result["sequence"] = self.sequence
        return result


class Output:

    def __init__(self, value, script):
        # Parameters should be bytes as transmitted i.e reversed
        if isinstance(value, bytes):
            assert len(value) == 8
            self.value = value[::-1]
        else:
            self.value = value

        self.script = script
        self.tx_index = None  # index of this output in it's parent tx

    @property
    def value(self):
        return bytes_to_int(self._value)

    @value.setter
    def value(self, x):
        self._value = pad(x, 8)

    def serialize(self):
        return self._value[::-1] + serialize(self.script)

    def asm(self):
        return asm(self.script)

    def type(self):
        if is_witness_program(self.script) and self.script[0] == 0:
            if len(self.script) == 22:
                return TX.P2WPKH
            if len(self.script) == 34:
                return TX.P2WSH
        return TX.UNKNOWN

    def __repr__(self):
        return f"{self.__class__.__name__}(type={self.type().value}, value={self.value/10**8} BTC)"

    def json(self, index=None):
        data = {
            "value": self.value/10**8,
        }
        if index is not None:
            data["n"] = index
        data["scriptPubKey"] = {"asm": self.asm(), "hex": bytes_to_hex(self.script)}
        return data


class Transaction:

    def __init__(self, inputs, outputs, version=b'\x01\x00\x00\x00', lock_time=b'\x00\x00\x00\x00'):
        self.inputs = inputs
        self.outputs = outputs
        assert len(version) == 4, 'Invalid Version'
        assert len(lock_time) == 4, 'Invalid lock time'
        self._version = version[::-1]
        self._lock_time = lock_time[::-1]
        for idx, inp in enumerate(self.inputs):
            inp.tx_index = idx
        for idx, out in enumerate(self.outputs):
            out.tx_index = idx

    @property
    def version(self):
        return bytes_to_int(self._version)

    @property
    def lock_time(self):
        return bytes_to_int(self._lock_time)

    def __len__(self):
        return len(self.serialize())

    @property
    def segwit(self):
        """https://github.com/bitcoin/bips/blob/master/bip-0141.mediawiki#specification"""
        return any((inp.segwit for inp in self.inputs))

    def serialize(self, segwit=None):
        if segwit is None:
            segwit = self.segwit
        inputs = concat((inp.serialize() for inp in self.inputs))
        outputs = concat((out.serialize() for out in self.outputs))
        if not segwit:
            return self._version[::-1] + var_int(len(self.inputs)) + inputs + var_int(len(self.outputs)) + outputs + self._lock_time[::-1]
        witness = concat((inp.serialize_witness() for inp in self.inputs))
        return self._version[::-1] + b'\x00\x01' + var_int(len(self.inputs)) + inputs + var_int(len(self.outputs)) + outputs + witness + self._lock_time[::-1]

    @classmethod
    def deserialize(cls, tx: bytes) -> 'Transaction':
        original_tx = copy(tx)
        try:
            return cls._deserialize(tx)
        except AssertionError as e:
            raise SerializationError(str(e), data=original_tx) from None
        except IndexError:
            raise SerializationError('Unexpected end of data', data=original_tx) from None

    @classmethod
    def _deserialize(cls, tx: bytes) -> 'Transaction':
        segwit = False
        tx = deque(tx)

        def pop(x):
            data = []
            for _ in range(x):
                data.append(tx.popleft())
            return bytes(data)

        def read_var_int():
            """https://en.bitcoin.it/wiki/Protocol_documentation#Variable_length_integer"""
            byte = pop(1)
            if byte == b'\xfd':
                result = pop(2)
            elif byte == b'\xfe':
                result = pop(4)
            elif byte == b'\xff':
                result = pop(8)
            else:
                result = byte
            return bytes_to_int(result[::-1])

        version = pop(4)
        input_count = read_var_int()
        if input_count == 0x00:
            segwit = True

            flag = pop(1)
            assert flag == b'\x01', 'Invalid segwit flag'
            input_count = read_var_int()

        inputs, outputs = [], []

        for _ in range(input_count):
            tx_hash = pop(32)
            index = pop(4)
            script_len = read_var_int()
            script = pop(script_len)
            sequence = pop(4)

            inputs.append(Input(output=tx_hash, index=index, script=script, sequence=sequence))

        output_count = read_var_int()

        for _ in range(output_count):
            value = pop(8)
            script_len = read_var_int()
            script = pop(script_len)

            outputs.append(Output(value=value, script=script))

        if segwit:
            for inp in inputs:
                len_witness = read_var_int()

                elements = []
                for _ in range(len_witness):
                    element_len = read_var_int()
                    elements.append(pop(element_len))

                if elements:
                    inp.witness = tuple(elements)

        lock_time = pop(4)
        assert not tx, f"{len(tx)} Leftover bytes"
        return cls(inputs=inputs, outputs=outputs, version=version, lock_time=lock_time)

    def __repr__(self):
        return f"{self.__class__.__name__}(inputs={len(self.inputs)}, outputs={len(self.outputs)})"

    def txid(self):
        """Double SHA256 of the non witness serialization, in internal byte order"""
        return hash256(self.serialize(segwit=False))

    def wtxid(self):
        if not self.segwit:
            return self.txid()
        return hash256(self.serialize(segwit=True))

    def json(self):
        return {
            "txid": bytes_to_hex(self.txid()[::-1]),
            "version": self.version,
            "size": len(self.serialize()),
            "locktime": self.lock_time,
            "vin": [inp.json() for inp in self.inputs],
            "vout": [out.json(i) for i, out in enumerate(self.outputs)]
        }

    def hex(self):
        return bytes_to_hex(self.serialize())

    @classmethod
    def from_hex(cls, hexstring):
        return cls.deserialize(hex_to_bytes(hexstring))
