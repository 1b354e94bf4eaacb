# vchain/tests/e2e/test_api_chain_lifecycle.py
import sys
import os
import unittest
from unittest.mock import patch
from fastapi.testclient import TestClient

# --- AJUSTE DE RUTAS ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, '../../..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Importamos la APP y el contenedor
from vchain.interface.api.server import app
from vchain.interface.api.dependencies import ChainContainer
from vchain.core.config.config_manager import ConfigManager


class TestApiChainLifecycle(unittest.TestCase):

    def setUp(self):
        # 1. Entorno LIMPIO: cadena volátil en memoria
        self.env = patch.dict(os.environ, {
            "VCH_STORAGE_ENGINE": "memory",
            "VCH_CHAIN_NAME": "api-test",
            "VCH_AUTOCOMMIT": "false",
        })
        self.env.start()
        ConfigManager.reset()

    def tearDown(self):
        self.env.stop()
        ConfigManager.reset()

    def test_full_api_flow(self):
        print("\n==============================================")
        print("   TEST E2E: API DE CADENA (CLIENTE HTTP)     ")
        print("==============================================\n")

        # 'with' activa el lifespan: abre la cadena al entrar y la cierra al salir
        with TestClient(app) as client:

            print("[1] Consultando GET /chain...")
            response = client.get("/chain")
            self.assertEqual(response.status_code, 200, response.text)
            status = response.json()
            print(f"    -> Estado: {status}")
            self.assertEqual(status["name"], "api-test")
            self.assertEqual(status["height"], 0)
            self.assertIsNone(status["head"])

            print("\n[2] Minando dos bloques con POST /chain/blocks...")
            first = client.post("/chain/blocks", json={"data": [{"from": "a", "to": "b", "amount": 5}]})
            self.assertEqual(first.status_code, 201, first.text)
            second = client.post("/chain/blocks", json={"data": {"memo": "segundo"}})
            self.assertEqual(second.status_code, 201, second.text)

            first_block, second_block = first.json(), second.json()
            self.assertEqual(first_block["index"], 0)
            self.assertEqual(second_block["previous"], first_block["hash"])
            self.assertTrue(second_block["hash"].endswith("0000"))
            self.assertTrue(second_block["valid"])

            print("\n[3] Listando y buscando bloques...")
            blocks = client.get("/chain/blocks").json()
            self.assertEqual([b["hash"] for b in blocks], [first_block["hash"], second_block["hash"]])
            self.assertEqual(len(client.get("/chain/blocks", params={"limit": 1}).json()), 1)

            found = client.get(f"/chain/blocks/{second_block['hash']}")
            self.assertEqual(found.status_code, 200)
            self.assertEqual(found.json()["index"], 1)
            self.assertEqual(client.get(f"/chain/blocks/{'f' * 64}").status_code, 404)

            print("\n[4] Verificando integridad...")
            verify = client.get("/chain/verify", params={"quick": "false"}).json()
            self.assertEqual(verify, {"quick": False, "is_valid": True})

            print("\n[5] Rollback sin destino en una cadena íntegra -> 409...")
            self.assertEqual(client.post("/chain/rollback", json={}).status_code, 409)

            print("\n[6] Commit de lo pendiente...")
            commit = client.post("/chain/commit").json()
            self.assertEqual(commit["added"], [first_block["hash"], second_block["hash"]])
            self.assertEqual(commit["height"], 2)
            self.assertEqual(client.get("/chain").json()["pending_operations"], 0)

            print("\n[7] Rollback al primer bloque...")
            rollback = client.post("/chain/rollback", json={"target_hash": first_block["hash"]}).json()
            self.assertEqual(rollback, {"removed": [second_block["hash"]], "height": 1})
            self.assertEqual(client.post("/chain/rollback", json={"target_hash": "abc"}).status_code, 404)

            status = client.get("/chain").json()
            self.assertEqual(status["head"], first_block["hash"])
            self.assertEqual(status["pending_operations"], 1)

        print("\n[SUCCESS] Ciclo de vida de la API completado.")


if __name__ == '__main__':
    unittest.main()
