"""
Zero dependency signing and verification of native segwit (P2WPKH and P2WSH multisig) transaction inputs.
"""

from .transformations import sha256, hash160, hash256, bytes_to_hex, hex_to_bytes
from .ECDSA.secp256k1 import PrivateKey, PublicKey, Signature, generate_keypair, to_signature
from .BTC.opcodes import OP, SIGHASH, TX
from .BTC.network import NETWORK
from .BTC.transaction import Transaction, Input, Output
from .BTC.multisig import (
    RedeemScript, RedeemScriptContent, RedeemScriptBuilder, build_redeem_script,
    p2wsh_locking_script, p2wpkh_locking_script
)
from .BTC.sighash import compute_sighash, signature_form, p2wpkh_script_code
from .BTC.sign import (
    InputSignature, sign, sign_p2wpkh, sign_p2wsh_multisig,
    assemble_witness_p2wpkh, assemble_witness_p2wsh, finalize_witness_p2wsh
)
from .BTC.verify import verify, verify_witness_p2wpkh, verify_witness_p2wsh
from .BTC.signer import InputSigner, P2WPKHInputSigner, P2WSHInputSigner
from .BTC.address import p2wsh_address, p2wpkh_address, address_to_script, address_type
from .BTC.error import *

__all__ = [
    'sha256',
    'hash160',
    'hash256',
    'bytes_to_hex',
    'hex_to_bytes',
    'PrivateKey',
    'PublicKey',
    'Signature',
    'generate_keypair',
    'to_signature',
    'OP',
    'SIGHASH',
    'TX',
    'NETWORK',
    'Transaction',
    'Input',
    'Output',
    'RedeemScript',
    'RedeemScriptContent',
    'RedeemScriptBuilder',
    'build_redeem_script',
    'p2wsh_locking_script',
    'p2wpkh_locking_script',
    'compute_sighash',
    'signature_form',
    'p2wpkh_script_code',
    'InputSignature',
    'sign',
    'sign_p2wpkh',
    'sign_p2wsh_multisig',
    'assemble_witness_p2wpkh',
    'assemble_witness_p2wsh',
    'finalize_witness_p2wsh',
    'verify',
    'verify_witness_p2wpkh',
    'verify_witness_p2wsh',
    'InputSigner',
    'P2WPKHInputSigner',
    'P2WSHInputSigner',
    'p2wsh_address',
    'p2wpkh_address',
    'address_to_script',
    'address_type',
    'TransactionError',
    'SerializationError',
    'SigningError',
    'InputIndexOutOfRange',
    'ConfigurationError',
    'InvalidThreshold',
    'TooManyKeys',
    'DuplicateKey',
    'SignatureCountExceedsKeys',
    'NotEnoughSignatures',
    'RedeemScriptError',
    'NotStandard',
    'ScriptValidationError',
    'SignatureDecodeError',
    'InvalidKey',
    'Bech32DecodeError',
    'InvalidAddress',
]

__version__ = "0.1"
