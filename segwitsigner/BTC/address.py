from typing import Union

from segwitsigner import message
from segwitsigner.transformations import hash160, sha256
from segwitsigner.ECDSA.secp256k1 import PublicKey
from segwitsigner.BTC import bech32
from segwitsigner.BTC.opcodes import TX, OP
from segwitsigner.BTC.script import push
from segwitsigner.BTC.network import network, networks
from segwitsigner.BTC.error import Bech32DecodeError, InvalidAddress


def witness_byte(witver: int) -> bytes:
    return OP.small_int(witver).byte


def script_to_bech32(script: bytes, witver: int = 0, _network=None) -> str:
    """https://github.com/bitcoin/bips/blob/master/bip-0141.mediawiki#witness-program"""
    witprog = sha256(script)
    return bech32.encode(network('hrp', _network), witver, witprog)


def pubkey_to_bech32(pub: PublicKey, witver: int = 0, _network=None) -> str:
    """https://github.com/bitcoin/bips/blob/master/bip-0141.mediawiki#witness-program"""
    witprog = hash160(pub.encode(compressed=True))
    return bech32.encode(network('hrp', _network), witver, witprog)


def p2wsh_address(redeem_script, _network=None) -> str:
    script = redeem_script.bytes() if isinstance(redeem_script, message.Message) else bytes(redeem_script)
    return script_to_bech32(script, _network=_network)


def p2wpkh_address(public_key: Union[PublicKey, bytes], _network=None) -> str:
    if not isinstance(public_key, PublicKey):
        public_key = PublicKey.decode(bytes(public_key))
    return pubkey_to_bech32(public_key, _network=_network)


def _decode(addr: str):
    hrp = addr.lower().rpartition('1')[0]
    if hrp not in [net['hrp'] for net in networks.values()]:
        raise InvalidAddress(f"{addr} : Invalid human-readable part")
    try:
        return bech32.decode(hrp, addr)
    except Bech32DecodeError as e:
        raise InvalidAddress(f"{addr} : {e}") from None


def address_to_script(addr: str) -> bytes:
    """https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki#segwit-address-format"""
    witver, witprog = _decode(addr)
    return witness_byte(witver) + push(witprog)


def address_type(addr: str) -> TX:
    witver, witprog = _decode(addr)
    if witver != 0x00:
        return TX.UNKNOWN
    return TX.P2WPKH if len(witprog) == 20 else TX.P2WSH
