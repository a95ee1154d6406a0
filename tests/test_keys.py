import os
import secrets
import unittest
from unittest import mock

from segwitsigner.ECDSA.secp256k1 import (
    PrivateKey, PublicKey, Signature, generate_keypair, rfc6979, to_signature, CURVE
)
from segwitsigner.BTC.network import NETWORK
from segwitsigner.BTC.error import InvalidKey, SignatureDecodeError
from segwitsigner.transformations import hex_to_bytes, hex_to_int, sha256


class TestPubKey(unittest.TestCase):

    def test_compression(self):
        prv, pub = generate_keypair()

        encoded = pub.encode(compressed=True)
        self.assertEqual(len(encoded), 33)
        self.assertEqual(PublicKey.decode(encoded), pub)

        encoded = pub.encode(compressed=False)
        self.assertEqual(len(encoded), 65)
        self.assertEqual(PublicKey.decode(encoded), pub)

    def test_generator(self):
        pub = PrivateKey.from_int(1).to_public()
        self.assertEqual(pub.hex(), '0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798')
        self.assertEqual(PublicKey.from_hex('0279BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798'), pub)

    def test_hashable(self):
        _, pub = generate_keypair()
        same = PublicKey.decode(pub.encode())
        self.assertEqual(len({pub, same}), 1)

    def test_invalid(self):
        for key in (b'', b'\x02' * 32, b'\x05' + b'\x01' * 32, b'\x04' + b'\x01' * 64):
            with self.assertRaises(InvalidKey):
                PublicKey.decode(key)
        with self.assertRaises(InvalidKey):
            PublicKey.from_hex('02' + 'ff' * 32)


class TestPrivKey(unittest.TestCase):

    def test_wif(self):
        key = PrivateKey.from_int(1)
        self.assertEqual(key.wif(compressed=True), 'KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn')
        self.assertEqual(key.wif(compressed=False), '5HpHagT65TZzG1PH3CSu63k8DbpvD8s5ip4nEB3kEsreAnchuDf')

        decoded = PrivateKey.from_wif('KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn')
        self.assertEqual(decoded, key)
        self.assertTrue(decoded.compressed)
        self.assertEqual(decoded.network, NETWORK.MAIN)
        self.assertFalse(PrivateKey.from_wif('5HpHagT65TZzG1PH3CSu63k8DbpvD8s5ip4nEB3kEsreAnchuDf').compressed)

    def test_compression(self):
        prv, pub = generate_keypair()

        self.assertEqual(PrivateKey.from_wif(prv.wif(compressed=False)), prv)
        self.assertEqual(PrivateKey.from_wif(prv.wif(compressed=True)), prv)

    def test_test_network(self):
        prv = PrivateKey.random(_network=NETWORK.TEST)
        wif = prv.wif()
        self.assertIn(wif[0], 'c')
        decoded = PrivateKey.from_wif(wif)
        self.assertEqual(decoded.network, NETWORK.TEST)
        self.assertEqual(decoded, prv)

    def test_network_variable(self):
        prv = PrivateKey.from_int(1)
        with mock.patch.dict(os.environ, {'SEGWITSIGNER_NETWORK': 'test'}):
            self.assertEqual(PrivateKey.from_wif(prv.wif()).network, NETWORK.TEST)
        self.assertEqual(PrivateKey.from_wif(prv.wif()).network, NETWORK.MAIN)

    def test_invalid_wif(self):
        with self.assertRaises(InvalidKey):
            PrivateKey.from_wif('KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWm')
        with self.assertRaises(InvalidKey):
            PrivateKey.from_wif('0OIl')

    def test_range(self):
        with self.assertRaises(InvalidKey):
            PrivateKey(b'\x00' * 32)
        with self.assertRaises(InvalidKey):
            PrivateKey.from_int(CURVE.N)
        with self.assertRaises(InvalidKey):
            PrivateKey(b'\x01' * 33)

    def test_repr_hides_secret(self):
        prv = PrivateKey.from_hex('619c335025c7f4012e556c2a58b2506e30b8511b53ade95ea316fd8c3286feb9')
        self.assertNotIn('619c33', repr(prv))
        self.assertNotIn('619c33', str(prv))


class TestSignature(unittest.TestCase):

    def test_rfc6979(self):
        """https://bitcointalk.org/index.php?topic=285142.msg3299061#msg3299061"""
        digest = sha256(b'Satoshi Nakamoto')
        k = next(rfc6979(1, digest))
        self.assertEqual(k, 0x8F8A276C19F4149656B280621E358CCE24F5F52542772691EE69063B74F15D15)

        sig = PrivateKey.from_int(1).sign_hash(digest)
        self.assertEqual(
            sig.compact().hex(),
            '934b1ea10a4b3c1757e2b0c017d0b6143ce3c9a7e6a4a49860d7a6ab210ee3d8'
            '2442ce9d2b916064108014783e923ec36b49743e2ffa1c4496f01a512aafd9e5'
        )

    def test_signing(self):
        digest = secrets.token_bytes(32)
        private, public = generate_keypair()
        sig = private.sign_hash(digest)

        fake_sig = Signature(sig.r + 1, sig.s - 1)
        _, fake_public = generate_keypair()
        fake_digest = (int.from_bytes(digest, 'big') ^ 1).to_bytes(32, 'big')

        self.assertTrue(sig.is_low_s())
        self.assertTrue(sig.verify_hash(digest, public))
        self.assertFalse(sig.verify_hash(digest, fake_public))
        self.assertFalse(fake_sig.verify_hash(digest, public))
        self.assertFalse(sig.verify_hash(fake_digest, public))

    def test_deterministic(self):
        private, _ = generate_keypair()
        digest = secrets.token_bytes(32)
        self.assertEqual(private.sign_hash(digest), private.sign_hash(digest))

    def test_digest_length(self):
        private, _ = generate_keypair()
        for digest in (b'', secrets.token_bytes(31), secrets.token_bytes(33)):
            with self.assertRaises(ValueError):
                private.sign_hash(digest)

    def test_encoding(self):
        raw_sig = hex_to_bytes('304402206878b5690514437a2342405029426cc2b25b4a03fc396fef845d656cf62bad2c022018610a8d37e3384245176ab49ddbdbe8da4133f661bf5ea7ad4e3d2b912d856f')

        sig = Signature.decode(raw_sig)

        self.assertEqual(sig.r, 47253809947851177065887724633329625063088643784040492056218945870752194997548)
        self.assertEqual(sig.s, 11026965355983493404719379810734327200902731292741433431270495068542334764399)

        self.assertEqual(sig.encode(), raw_sig)

        # Test padding
        sig = Signature(secrets.randbelow(10**8) + 1, secrets.randbelow(10**8) + 1)
        self.assertEqual(sig, Signature.decode(sig.encode()))

        sig = Signature(secrets.randbelow(CURVE.N - 1) + 1, secrets.randbelow(CURVE.N - 1) + 1)
        self.assertEqual(sig, Signature.decode(sig.encode()))

    def test_low_s(self):
        r = hex_to_int('316eb3cad8b66fcf1494a6e6f9542c3555addbf337f04b62bf4758483fdc881d')
        s = hex_to_int('bf46d26cef45d998a2cb5d2d0b8342d70973fa7c3c37ae72234696524b2bc812')
        sig_high_s = hex_to_bytes('30450220316eb3cad8b66fcf1494a6e6f9542c3555addbf337f04b62bf4758483fdc881d022100bf46d26cef45d998a2cb5d2d0b8342d70973fa7c3c37ae72234696524b2bc812')
        sig_low_s = hex_to_bytes('30440220316eb3cad8b66fcf1494a6e6f9542c3555addbf337f04b62bf4758483fdc881d022040b92d9310ba26675d34a2d2f47cbd27b13ae26a7310f1c99c8bc83a850a792f')

        sig_high = Signature(r, s, force_low_s=False)
        sig_low = Signature(r, s, force_low_s=True)
        self.assertEqual(sig_low.encode(), sig_low_s)
        self.assertEqual(sig_high.encode(), sig_high_s)

        decoded = Signature.decode(sig_high_s)
        self.assertFalse(decoded.is_low_s())
        self.assertEqual(decoded, sig_high)
        self.assertEqual(Signature.decode(sig_low_s), sig_low)

    def test_strict_der(self):
        valid = hex_to_bytes('304402206878b5690514437a2342405029426cc2b25b4a03fc396fef845d656cf62bad2c022018610a8d37e3384245176ab49ddbdbe8da4133f661bf5ea7ad4e3d2b912d856f')
        invalid = [
            b'',
            valid[:-1],
            valid + b'\x01',
            b'\x31' + valid[1:],
            valid[:2] + b'\x03' + valid[3:],
            # r with excess padding
            hex_to_bytes('3045022100' + '6878b5690514437a2342405029426cc2b25b4a03fc396fef845d656cf62bad2c' + '022018610a8d37e3384245176ab49ddbdbe8da4133f661bf5ea7ad4e3d2b912d856f'),
            # negative r
            hex_to_bytes('30440220' + '9878b5690514437a2342405029426cc2b25b4a03fc396fef845d656cf62bad2c' + '022018610a8d37e3384245176ab49ddbdbe8da4133f661bf5ea7ad4e3d2b912d856f'),
        ]
        self.assertEqual(Signature.decode(valid).encode(), valid)
        for raw in invalid:
            with self.assertRaises(SignatureDecodeError):
                Signature.decode(raw)

    def test_to_signature(self):
        private, _ = generate_keypair()
        sig = private.sign_hash(secrets.token_bytes(32))
        self.assertIs(to_signature(sig), sig)
        self.assertEqual(to_signature(sig.encode()), sig)
        self.assertEqual(to_signature(sig.compact(), compact=True), sig)
        with self.assertRaises(SignatureDecodeError):
            to_signature(sig.compact()[:-1], compact=True)
        with self.assertRaises(TypeError):
            to_signature('3044')
