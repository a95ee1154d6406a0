"""Per input kind signers bundling digest computation, signing, verification and witness construction"""

from typing import Sequence, Union

from segwitsigner.ECDSA.secp256k1 import PrivateKey, PublicKey
from segwitsigner.BTC.opcodes import TX
from segwitsigner.BTC.transaction import Transaction
from segwitsigner.BTC.multisig import RedeemScript, p2wpkh_locking_script, p2wsh_locking_script
from segwitsigner.BTC.sighash import compute_sighash, p2wpkh_script_code, PreviousValue
from segwitsigner.BTC.sign import (
    InputSignature, Witness, sign, assemble_witness_p2wpkh, assemble_witness_p2wsh, finalize_witness_p2wsh
)
from segwitsigner.BTC.verify import verify
from segwitsigner.BTC.error import InputIndexOutOfRange


class InputSigner:
    """Common part of the two input kinds, subclasses provide the scriptCode and the witness layout"""

    kind = TX.UNKNOWN

    def script_code(self) -> bytes:
        raise NotImplementedError

    def locking_script(self) -> bytes:
        raise NotImplementedError

    def signature_hash(self, tx: Transaction, index: int, value: PreviousValue) -> bytes:
        return compute_sighash(tx, index, self.script_code(), value)

    def sign_input(self, tx: Transaction, index: int, value: PreviousValue, private: PrivateKey) -> InputSignature:
        return sign(private, self.signature_hash(tx, index, value))

    def verify_input(self, tx: Transaction, index: int, value: PreviousValue, public_key: PublicKey, signature) -> bool:
        if isinstance(signature, (bytes, bytearray)):
            signature = InputSignature(signature)
        return verify(public_key, self.signature_hash(tx, index, value), signature)

    def witness_data(self, signatures) -> Witness:
        raise NotImplementedError

    def spend_input(self, tx: Transaction, index: int, signatures):
        """Writes the witness into the index-th input, the input becomes spent"""
        if not 0 <= index < len(tx.inputs):
            raise InputIndexOutOfRange(index, len(tx.inputs), tx=tx)
        tx.inputs[index].witness = self.witness_data(signatures)


class P2WPKHInputSigner(InputSigner):

    kind = TX.P2WPKH

    def __init__(self, public_key: Union[PublicKey, bytes]):
        if not isinstance(public_key, PublicKey):
            public_key = PublicKey.decode(bytes(public_key))
        self.public_key = public_key

    def script_code(self) -> bytes:
        return p2wpkh_script_code(self.public_key)

    def locking_script(self) -> bytes:
        return p2wpkh_locking_script(self.public_key)

    def address(self, _network=None) -> str:
        from segwitsigner.BTC.address import p2wpkh_address
        return p2wpkh_address(self.public_key, _network=_network)

    def witness_data(self, signature) -> Witness:
        return assemble_witness_p2wpkh(signature, self.public_key)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.public_key.hex()})"


class P2WSHInputSigner(InputSigner):

    kind = TX.P2WSH

    def __init__(self, redeem_script: Union[RedeemScript, bytes]):
        if not isinstance(redeem_script, RedeemScript):
            redeem_script = RedeemScript(redeem_script)
        self.redeem_script = redeem_script

    def script_code(self) -> bytes:
        return self.redeem_script.bytes()

    def locking_script(self) -> bytes:
        return p2wsh_locking_script(self.redeem_script)

    def address(self, _network=None) -> str:
        return self.redeem_script.address(_network=_network)

    def witness_data(self, signatures: Sequence) -> Witness:
        """Signatures per public key (or a mapping from key to signature), reduced to the quorum"""
        return finalize_witness_p2wsh(assemble_witness_p2wsh(self.redeem_script, signatures), self.redeem_script)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.redeem_script!r})"
