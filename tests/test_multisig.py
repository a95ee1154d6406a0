import unittest
import pathlib

from segwitsigner.ECDSA.secp256k1 import PrivateKey, PublicKey, generate_keypair
from segwitsigner.BTC.multisig import (
    RedeemScript, RedeemScriptBuilder, build_redeem_script, p2wsh_locking_script, p2wpkh_locking_script
)
from segwitsigner.BTC.address import p2wsh_address
from segwitsigner.BTC.script import push
from segwitsigner.BTC.signer import P2WSHInputSigner
from segwitsigner.BTC.error import (
    InvalidThreshold, TooManyKeys, DuplicateKey, NotStandard, ConfigurationError, InvalidKey
)
from segwitsigner.transformations import hex_to_bytes, bytes_to_hex, sha256

HERE = pathlib.Path(__file__).parent.absolute()

# https://github.com/bitcoin/bips/blob/master/bip-0143.mediawiki#p2sh-p2wsh
BIP143_6_OF_6 = (
    '56210307b8ae49ac90a048e9b53357a2354b3334e9c8bee813ecb98e99a7e07e8c3ba32103b28f0c28bfab54554ae8c658ac5c3e0ce6e79ad33'
    '6331f78c428dd43eea8449b21034b8113d703413d57761b8b9781957b8c0ac1dfe69f492580ca4195f50376ba4a21033400f6afecb833092a9a'
    '21cfdf1ed1376e58c5d1f47de74683123987e967a8f42103a6d48b1131e94ba04d9737d61acdaa1322008af9602b3b14862c07a1789aac1621'
    '02d8b661b0b3302ee2f162b09e07a55ad5dfbe673a9f01d9f0c19617681024306b56ae'
)

STANDARD_SHORT = (
    '5321027db7837e51888e94c094703030d162c682c8dba312210f44ff440fbd5e5c24732102bdd272891c9e4dfc3962b1fdffd5a59732019816'
    'f9db4833634dbdaf01a401a52103280883dc31ccaee34218819aaa245480c35a33acd91283586ff6d1284ed681e52103e2bc790a6e32bf5a76'
    '6919ff55b1f9e9914e13aed84f502c0e4171976e19deb054ae'
)


def keys(n):
    return [PrivateKey.from_int(i).to_public() for i in range(1, n + 1)]


class TestRedeemScript(unittest.TestCase):

    def test_layout(self):
        k1, k2, k3 = keys(3)
        script = build_redeem_script([k1, k2, k3], 2)
        expected = (
            b'\x52'
            + b'\x21' + k1.encode() + b'\x21' + k2.encode() + b'\x21' + k3.encode()
            + b'\x53' + b'\xae'
        )
        self.assertEqual(script.bytes(), expected)
        self.assertEqual(script.asm(), f'OP_2 {k1.hex()} {k2.hex()} {k3.hex()} OP_3 OP_CHECKMULTISIG')
        self.assertEqual(script.quorum, 2)
        self.assertEqual(script.public_keys, [k1, k2, k3])

    def test_deterministic(self):
        pubs = keys(5)
        self.assertEqual(build_redeem_script(pubs, 3), build_redeem_script(pubs, 3))
        self.assertEqual(build_redeem_script(pubs, 3), build_redeem_script([pub.encode() for pub in pubs], 3))

    def test_order_matters(self):
        k1, k2, k3 = keys(3)
        first = build_redeem_script([k1, k2, k3], 2)
        swapped = build_redeem_script([k2, k1, k3], 2)
        self.assertNotEqual(first, swapped)
        self.assertNotEqual(first.script_hash(), swapped.script_hash())
        self.assertNotEqual(p2wsh_address(first), p2wsh_address(swapped))

    def test_bip143_script(self):
        pubs = RedeemScript.from_hex(BIP143_6_OF_6).public_keys
        self.assertEqual(build_redeem_script(pubs, 6).hex(), BIP143_6_OF_6)

    def test_threshold(self):
        pubs = keys(3)
        with self.assertRaises(InvalidThreshold):
            build_redeem_script(pubs, 4)
        with self.assertRaises(InvalidThreshold):
            build_redeem_script(pubs, 0)
        with self.assertRaises(InvalidThreshold):
            build_redeem_script([], 1)
        self.assertEqual(build_redeem_script(pubs, 3).quorum, 3)
        self.assertEqual(build_redeem_script(pubs, 1).quorum, 1)

    def test_too_many_keys(self):
        with self.assertRaises(TooManyKeys):
            build_redeem_script(keys(16), 2)
        script = build_redeem_script(keys(15), 15)
        self.assertTrue(script.bytes().startswith(b'\x5f'))
        self.assertTrue(script.bytes().endswith(b'\x5f\xae'))

    def test_duplicates(self):
        k1, k2 = keys(2)
        with self.assertRaises(DuplicateKey):
            build_redeem_script([k1, k2, k1], 2)
        with self.assertRaises(ConfigurationError):
            build_redeem_script([k1, k1.encode()], 1)

    def test_invalid_keys(self):
        k1, = keys(1)
        with self.assertRaises(InvalidKey):
            build_redeem_script([k1, k1.encode(compressed=False)], 1)
        with self.assertRaises(InvalidKey):
            build_redeem_script([k1, b'\x02' + b'\xff' * 32], 1)

    def test_builder(self):
        pubs = keys(4)
        builder = RedeemScriptBuilder()
        for pub in pubs:
            builder.public_key(pub)
        script = builder.quorum(3).to_script()
        self.assertEqual(script, build_redeem_script(pubs, 3))
        self.assertEqual(RedeemScriptBuilder(pubs).to_script().quorum, 4)
        with self.assertRaises(InvalidThreshold):
            RedeemScriptBuilder().quorum(3).to_script()

    def test_hex_round_trip(self):
        script = build_redeem_script([generate_keypair()[1] for _ in range(4)], 3)
        self.assertEqual(RedeemScript.from_hex(str(script)), script)


class TestParse(unittest.TestCase):

    def test_standard_short(self):
        content = RedeemScript.from_hex(STANDARD_SHORT).content()
        self.assertEqual(content.quorum, 3)
        self.assertEqual(len(content.public_keys), 4)
        self.assertEqual(content.public_keys[0].hex(), '027db7837e51888e94c094703030d162c682c8dba312210f44ff440fbd5e5c2473')

    def test_standard_long(self):
        # 12-of-18, the key count above 16 is a one byte push
        with open(HERE / "transactions" / "p2wsh_12_of_18_spend.txt") as f:
            raw = f.read().strip()
        script_hex = raw[raw.index('5c21031cf96b'):-len('00000000')]
        script = RedeemScript.from_hex(script_hex)
        self.assertEqual(script.quorum, 12)
        self.assertEqual(len(script.public_keys), 18)
        self.assertTrue(script.bytes().endswith(b'\x01\x12\xae'))
        self.assertEqual(script.hex(), script_hex)

    def test_not_standard(self):
        invalid = [
            '0020e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855',
            '',
            STANDARD_SHORT[:-2],                      # missing OP_CHECKMULTISIG
            STANDARD_SHORT[:-4] + '53ae',             # key count mismatch
            STANDARD_SHORT[:-2] + 'ac',               # OP_CHECKSIG
            STANDARD_SHORT + 'ae',                    # trailing data
            '55' + STANDARD_SHORT[2:],                # quorum larger than the key count
            '5321027db7837e',                         # truncated push
            'zz',
        ]
        for script in invalid:
            with self.assertRaises(NotStandard, msg=script):
                RedeemScript.from_hex(script)

    def test_uncompressed_key(self):
        k1, k2 = keys(2)
        script = b'\x51' + push(k1.encode(compressed=False)) + push(k2.encode()) + b'\x52\xae'
        with self.assertRaises(NotStandard):
            RedeemScript(script)
        with self.assertRaises(NotStandard):
            P2WSHInputSigner(script)


class TestLockingScripts(unittest.TestCase):

    def test_p2wsh(self):
        script = build_redeem_script(keys(3), 2)
        locking = p2wsh_locking_script(script)
        self.assertEqual(len(locking), 34)
        self.assertEqual(locking[:2], b'\x00\x20')
        self.assertEqual(locking[2:], sha256(script.bytes()))
        self.assertEqual(p2wsh_locking_script(script.bytes()), locking)
        self.assertEqual(script.locking_script(), locking)

    def test_bip143_p2wsh(self):
        # https://github.com/bitcoin/bips/blob/master/bip-0143.mediawiki#p2sh-p2wsh
        locking = p2wsh_locking_script(hex_to_bytes(BIP143_6_OF_6))
        self.assertEqual(bytes_to_hex(locking), '0020a16b5755f7f6f96dbd65f5f0d6ab9418b89af4b1f14a1bb8a09062c35f0dcb54')

    def test_p2wpkh(self):
        pub = PublicKey.from_hex('025476c2e83188368da1ff3e292e7acafcdb3566bb0ad253f62fc70f07aeee6357')
        locking = p2wpkh_locking_script(pub)
        self.assertEqual(bytes_to_hex(locking), '00141d0f172a0ecb48aee1be1f2687d2963ae33f71a1')
        self.assertEqual(p2wpkh_locking_script(pub.encode()), locking)
