class TransactionError(Exception):
    def __init__(self, message, tx=None, data=None, txhash=None):
        super().__init__(message)
        self.message = message
        self.tx = tx
        self.data = data
        self.txhash = txhash


class SerializationError(TransactionError):
    pass


class SigningError(TransactionError):
    pass


class InputIndexOutOfRange(SigningError, IndexError):
    """The requested input does not exist in the transaction"""

    def __init__(self, index, count, tx=None):
        super().__init__(f"Input index {index} out of range for a transaction with {count} inputs", tx=tx)
        self.index = index
        self.count = count


class ConfigurationError(ValueError):
    """A multisig configuration or signature set violates a structural constraint"""


class InvalidThreshold(ConfigurationError):
    pass


class TooManyKeys(ConfigurationError):
    pass


class DuplicateKey(ConfigurationError):
    pass


class SignatureCountExceedsKeys(ConfigurationError):
    pass


class NotEnoughSignatures(ConfigurationError):
    pass


class RedeemScriptError(Exception):
    pass


class NotStandard(RedeemScriptError):
    pass


class ScriptValidationError(Exception):
    pass


class SignatureDecodeError(ValueError):
    pass


class InvalidKey(ValueError):
    pass


class Bech32DecodeError(Exception):
    pass


class InvalidAddress(Exception):
    pass
