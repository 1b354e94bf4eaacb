# vchain/tests/unit/test_block.py
'''
Test Suite para Block:
    Minado al construir, re-minado explícito, verificación rápida vs
    completa, comparación y reconstrucción desde registros en reposo.
'''

import sys
import os
import unittest

# --- AJUSTE DE RUTA ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, '../../..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from vchain.core.config.protocol_constants import ProtocolConstants
from vchain.core.errors import InvalidArgumentError, MalformedBlockError, MiningExhaustedError
from vchain.core.models.block import Block
from vchain.core.services.block_hasher import SHA256
from vchain.tests.mocks.chain_fixtures import mined_blocks, sample_payload


class TestBlock(unittest.TestCase):

    def setUp(self):
        self.genesis, self.second = mined_blocks(2)

    def test_fixture_blocks_are_mined_and_linked(self):
        print("\n>> Ejecutando: test_fixture_blocks_are_mined_and_linked...")
        self.assertEqual(self.genesis.previous, SHA256.genesis_hash)
        self.assertEqual(self.second.previous, self.genesis.hash)
        for block in (self.genesis, self.second):
            self.assertTrue(block.hash.endswith(ProtocolConstants.DIFFICULTY_SUFFIX))
            self.assertTrue(block.verify(quick=False))
        print("[SUCCESS] Bloques minados y enlazados.")

    def test_defaults(self):
        print("\n>> Ejecutando: test_defaults...")
        block = Block()
        self.assertEqual(block.payload, [])
        self.assertEqual(block.previous, SHA256.genesis_hash)
        self.assertEqual(len(block.salt), ProtocolConstants.SALT_BYTES * 2)
        self.assertTrue(block.verify(quick=False))
        print("[SUCCESS] Payload vacío, enlace al génesis y salt aleatorio.")

    def test_payload_is_isolated_from_caller(self):
        print("\n>> Ejecutando: test_payload_is_isolated_from_caller...")
        payload = self.genesis.payload
        payload.append({"intruso": True})
        self.assertEqual(self.genesis.payload, sample_payload(0))
        self.assertTrue(self.genesis.verify(quick=False))
        print("[SUCCESS] El payload devuelto es una copia.")

    def test_set_payload_remines(self):
        print("\n>> Ejecutando: test_set_payload_remines...")
        old_hash = self.genesis.hash
        self.genesis.set_payload([{"nuevo": 1}])

        self.assertNotEqual(self.genesis.hash, old_hash)
        self.assertEqual(self.genesis.payload, [{"nuevo": 1}])
        self.assertTrue(self.genesis.verify(quick=False))
        print("[SUCCESS] El cambio de payload produce un nuevo hash válido.")

    def test_failed_remine_restores_state(self):
        print("\n>> Ejecutando: test_failed_remine_restores_state...")
        g = self.genesis
        block = Block(
            payload=g.payload, previous=g.previous, salt=g.salt,
            nonce=g.nonce, block_hash=g.hash, max_nonce=3
        )
        snapshot = block.to_json()

        with self.assertRaises(MiningExhaustedError):
            block.set_previous("f" * 64)

        self.assertEqual(block.to_json(), snapshot)
        print("[SUCCESS] Estado intacto tras un minado fallido.")

    def test_quick_verify_misses_tampering_full_verify_catches_it(self):
        print("\n>> Ejecutando: test_quick_verify_misses_tampering_full_verify_catches_it...")
        record = self.genesis.to_dict()
        record["data"] = [{"from": "mallory", "to": "mallory", "amount": 10 ** 6}]
        tampered = Block.from_dict(record)

        self.assertTrue(tampered.verify(quick=True))
        self.assertFalse(tampered.verify(quick=False))
        print("[SUCCESS] Solo la verificación completa detecta la manipulación.")

    def test_verify_never_raises(self):
        print("\n>> Ejecutando: test_verify_never_raises...")
        broken = Block(payload=[], previous="ab", nonce=0, block_hash="not-a-hash")
        self.assertFalse(broken.verify(quick=True))
        self.assertFalse(broken.verify(quick=False))
        print("[SUCCESS] verify() retorna False sin lanzar.")

    def test_equals(self):
        print("\n>> Ejecutando: test_equals...")
        twin = self.genesis.copy()
        self.assertTrue(self.genesis.equals(twin))
        self.assertTrue(self.genesis.equals(twin, quick=False))
        self.assertFalse(self.genesis.equals(self.second))

        same_payload = lambda a, b, quick: a.payload == b.payload
        self.assertFalse(self.genesis.equals(self.second, comparator=same_payload))

        with self.assertRaises(InvalidArgumentError):
            self.genesis.equals("no soy un bloque")  # type: ignore[arg-type]
        print("[SUCCESS] Comparación por hash, por contenido y personalizada.")

    def test_serialization_keeps_every_field(self):
        print("\n>> Ejecutando: test_serialization_keeps_every_field...")
        restored = Block.from_json(self.second.to_json())

        self.assertEqual(restored.to_dict(), self.second.to_dict())
        self.assertEqual(set(restored.to_dict()), {"data", "hash", "nonce", "previous", "salt"})
        print("[SUCCESS] to_json/from_json preservan el bloque.")

    def test_malformed_records(self):
        print("\n>> Ejecutando: test_malformed_records...")
        record = self.genesis.to_dict()
        del record["nonce"]

        with self.assertRaises(MalformedBlockError):
            Block.from_dict(record)

        without_payload = self.genesis.to_dict()
        del without_payload["data"]
        with self.assertRaises(MalformedBlockError):
            Block.from_dict(without_payload)

        with self.assertRaises(MalformedBlockError):
            Block.from_dict(["no", "es", "un", "objeto"])
        with self.assertRaises(MalformedBlockError):
            Block.from_json("{roto")
        with self.assertRaises(MalformedBlockError):
            Block.from_json("")
        print("[SUCCESS] Registros corruptos rechazados.")

    def test_explicit_hash_requires_nonce(self):
        print("\n>> Ejecutando: test_explicit_hash_requires_nonce...")
        with self.assertRaises(InvalidArgumentError):
            Block(payload=[], block_hash=self.genesis.hash)
        with self.assertRaises(InvalidArgumentError):
            Block(payload=[], previous="")
        print("[SUCCESS] Argumentos inválidos rechazados.")


if __name__ == '__main__':
    unittest.main()
