# vchain/tests/e2e/test_chain_persistence_lifecycle.py
'''
Ciclo completo sobre almacenamiento real (archivos y SQLite):
    crear -> agregar -> commit -> cerrar -> reabrir -> manipular en disco
    -> detectar -> rollback -> commit -> reabrir.
'''

import sys
import os
import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# --- AJUSTE DE RUTAS ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, '../../..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from vchain.core.config.config_manager import ConfigManager
from vchain.core.factories.chain_factory import ChainFactory
from vchain.infra.persistence.database_manager import DatabaseManager
from vchain.infra.persistence.sqlite.sqlite_storage import SqliteStorage
from vchain.tests.mocks.chain_fixtures import mined_blocks


class TestChainPersistenceLifecycle(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp(prefix="vchain_e2e_")
        self.env = patch.dict(os.environ, {"VCH_DATA_DIR": self.tmp_dir, "VCH_AUTOCOMMIT": "false"})
        self.env.start()
        ConfigManager.reset()
        self.blocks = mined_blocks(4)
        self.hashes = [b.hash for b in self.blocks]

    def tearDown(self):
        self.env.stop()
        ConfigManager.reset()
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    async def test_file_chain_tamper_and_recover(self):
        print("\n==============================================")
        print("   TEST E2E: CADENA EN ARCHIVOS               ")
        print("==============================================\n")

        print("[1] Creando cadena y confirmando 4 bloques...")
        chain = await ChainFactory.open_chain("ledger", engine="file")
        for block in self.blocks:
            await chain.add(block)
        await chain.commit()
        await chain.close()

        chain_dir = Path(self.tmp_dir) / "chains" / "ledger"
        self.assertEqual(len(list(chain_dir.glob("*.*0000"))), 4)

        print("[2] Manipulando el payload del bloque #2 directamente en disco...")
        target = chain_dir / f"2.{self.hashes[2]}"
        record = json.loads(target.read_text(encoding='utf-8'))
        record["data"] = [{"from": "mallory", "to": "mallory", "amount": 999}]
        target.write_text(json.dumps(record), encoding='utf-8')

        print("[3] Reabriendo: la verificación rápida no lo ve, la completa sí...")
        chain = await ChainFactory.open_chain("ledger", engine="file")
        self.assertEqual(chain.height, 4)
        self.assertTrue(await chain.verify(quick=True))
        self.assertFalse(await chain.verify(quick=False))

        print("[4] Rollback y commit...")
        removed = await chain.rollback()
        self.assertEqual([b.hash for b in removed], self.hashes[2:])
        await chain.close()

        print("[5] Reabriendo la cadena reparada...")
        chain = await ChainFactory.open_chain("ledger", engine="file")
        self.assertEqual([b.hash for b in chain.blocks], self.hashes[:2])
        self.assertTrue(await chain.verify(quick=False))
        await chain.close()
        print("\n[SUCCESS] Manipulación detectada y revertida en disco.")

    async def test_sqlite_chain_and_clone_share_database(self):
        print("\n==============================================")
        print("   TEST E2E: CADENA Y CLON EN SQLITE          ")
        print("==============================================\n")

        chain = await ChainFactory.open_chain("ledger", engine="sqlite")
        for block in self.blocks[:3]:
            await chain.add(block)
        await chain.commit()

        print("[1] Clonando hacia otra cadena de la misma base...")
        db_path = ConfigManager().persistence.db_path
        clone_storage = SqliteStorage(DatabaseManager(db_path), "ledger-CLONE")
        await clone_storage.connect()
        clone = await chain.clone(storage=clone_storage)
        self.assertEqual(clone.name, "ledger-CLONE")
        self.assertEqual(clone.pending_operations, [])

        # El clon arranca sin bitácora: se vacía y se reconstruye para persistirlo
        await clone.delete(index=0, count=clone.height)
        for block in self.blocks:
            await clone.add(block.copy())
        await clone.commit()

        print("[2] Rollback del clon: la original conserva sus filas...")
        await clone.rollback(self.hashes[0])
        await clone.close()
        await chain.close()

        chain = await ChainFactory.open_chain("ledger", engine="sqlite")
        clone = await ChainFactory.open_chain("ledger-CLONE", engine="sqlite")

        self.assertEqual([b.hash for b in chain.blocks], self.hashes[:3])
        self.assertEqual([b.hash for b in clone.blocks], self.hashes[:1])
        diff = await clone.diff(chain)
        self.assertEqual([None if b is None else b.hash for b in diff], [None] + self.hashes[1:3])

        await chain.close()
        await clone.close()
        print("\n[SUCCESS] Cadenas independientes en la misma base.")


if __name__ == '__main__':
    unittest.main()
