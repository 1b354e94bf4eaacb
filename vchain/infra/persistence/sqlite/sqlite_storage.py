# vchain/infra/persistence/sqlite/sqlite_storage.py
import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

# Interface
from vchain.core.errors import StorageFailureError
from vchain.core.interfaces.i_storage import IChainStorage

# Infra
from vchain.infra.persistence.database_manager import DatabaseManager

logger = logging.getLogger(__name__)

_BLOCK_COLUMNS = "hash, previous, nonce, salt, data"


class SqliteStorage(IChainStorage):
    """
    Bloques como filas indexadas por hash y metadatos en la tabla 'chains'.
    Cada instancia opera sobre una sola cadena ('chain_name').
    """

    def __init__(self, db_manager: DatabaseManager, chain_name: str):
        self.db_manager = db_manager
        self.chain_name = chain_name

    async def connect(self) -> None:
        self.db_manager.connect()
        logger.debug(f"🔌 SqliteStorage vinculado a '{self.chain_name}'.")

    async def close(self) -> None:
        self.db_manager.close()

    @staticmethod
    def _row_to_record(row: Tuple[Any, ...]) -> Dict[str, Any]:
        return {
            "hash": row[0],
            "previous": row[1],
            "nonce": row[2],
            "salt": row[3],
            "data": json.loads(row[4])
        }

    def _query(self, sql: str, params: Tuple[Any, ...]) -> List[Tuple[Any, ...]]:
        try:
            cursor = self.db_manager.get_connection().cursor()
            cursor.execute(sql, params)
            return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"❌ Error de lectura en SQLite: {e}")
            raise StorageFailureError("Fallo de lectura en SQLite", cause=e) from e

    def _execute(self, sql: str, params: Tuple[Any, ...]) -> None:
        conn = self.db_manager.get_connection()
        try:
            conn.execute(sql, params)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"❌ Error de escritura en SQLite: {e}")
            raise StorageFailureError("Fallo de escritura en SQLite", cause=e) from e

    async def find_block(
        self,
        block_hash: Optional[str] = None,
        index: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        if block_hash is not None:
            rows = self._query(
                f"SELECT {_BLOCK_COLUMNS} FROM blocks WHERE hash = ? AND chain_name = ?",
                (block_hash, self.chain_name)
            )
        elif index is not None:
            rows = self._query(
                f"SELECT {_BLOCK_COLUMNS} FROM blocks WHERE position = ? AND chain_name = ?",
                (index, self.chain_name)
            )
        else:
            return None
        return self._row_to_record(rows[0]) if rows else None

    async def list_blocks(self) -> List[Dict[str, Any]]:
        rows = self._query(
            f"SELECT {_BLOCK_COLUMNS} FROM blocks WHERE chain_name = ?",
            (self.chain_name,)
        )
        return [self._row_to_record(row) for row in rows]

    async def persist_block(self, block_data: Dict[str, Any], position: int) -> str:
        self._execute("""
            INSERT OR REPLACE INTO blocks
            (hash, chain_name, position, previous, nonce, salt, data)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            block_data["hash"],
            self.chain_name,
            position,
            block_data["previous"],
            block_data["nonce"],
            block_data["salt"],
            json.dumps(block_data["data"])
        ))
        return block_data["hash"]

    async def delete_block(self, block_hash: str) -> str:
        self._execute(
            "DELETE FROM blocks WHERE hash = ? AND chain_name = ?",
            (block_hash, self.chain_name)
        )
        return block_hash

    async def load_chain_metadata(self, name: str) -> Optional[Dict[str, Any]]:
        rows = self._query("SELECT name, height FROM chains WHERE name = ?", (name,))
        if not rows:
            return None
        return {"name": rows[0][0], "height": rows[0][1]}

    async def save_chain_metadata(self, metadata: Dict[str, Any]) -> bool:
        self._execute(
            "INSERT OR REPLACE INTO chains (name, height) VALUES (?, ?)",
            (metadata["name"], metadata["height"])
        )
        return True
