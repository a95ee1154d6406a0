from segwitsigner.transformations import bytes_to_int, int_to_bytes, hex_to_bytes, bytes_to_hex

__all__ = ['Message']


class Message:
    """Basic data class with useful constructors and methods"""

    def __init__(self, bytes):
        self.msg = bytes

    @classmethod
    def from_int(cls, i, **kwargs):
        return cls(int_to_bytes(i), **kwargs)

    @classmethod
    def from_hex(cls, h, **kwargs):
        return cls(hex_to_bytes(h), **kwargs)

    def int(self):
        return bytes_to_int(self.msg)

    def hex(self):
        return bytes_to_hex(self.msg)

    def bytes(self):
        return self.msg

    def __repr__(self):
        return repr(self.msg)

    def __eq__(self, other):
        return isinstance(other, Message) and self.msg == other.msg

    def __hash__(self):
        return hash(self.msg)

    def __len__(self):
        return len(self.msg)
