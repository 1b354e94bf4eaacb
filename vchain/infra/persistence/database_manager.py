# vchain/infra/persistence/database_manager.py

import sqlite3
import logging
import os
from typing import Optional

from vchain.core.errors import StorageFailureError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manejador explícito de la conexión SQLite.
    Cada dueño crea el suyo y controla connect()/close(); no hay estado
    global de conexión.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        if self.conn is not None:
            return self.conn

        # Asegurar directorios
        directory = os.path.dirname(self.db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        logger.info(f"🔌 Conectando al archivo: {self.db_path}")

        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.execute("PRAGMA journal_mode=DELETE;")
            self.conn.execute("PRAGMA synchronous=FULL;")
            self._create_tables(self.conn)
        except sqlite3.Error as e:
            logger.error(f"❌ No se pudo abrir la base de datos {self.db_path}: {e}")
            self.close()
            raise StorageFailureError(f"No se pudo abrir {self.db_path}", cause=e) from e

        return self.conn

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        cursor = conn.cursor()

        # 1. Tabla de Bloques (clave: cadena + hash)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS blocks (
                hash TEXT NOT NULL,
                chain_name TEXT NOT NULL,
                position INTEGER NOT NULL,
                previous TEXT NOT NULL,
                nonce INTEGER NOT NULL,
                salt TEXT NOT NULL,
                data JSON NOT NULL,
                PRIMARY KEY (chain_name, hash)
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_blocks_chain ON blocks(chain_name, position)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_blocks_previous ON blocks(previous)')

        # 2. Tabla de Cadenas (metadatos)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS chains (
                name TEXT PRIMARY KEY,
                height INTEGER NOT NULL
            )
        ''')

        conn.commit()

    def get_connection(self) -> sqlite3.Connection:
        return self.connect()

    def close(self) -> None:
        if self.conn is None:
            return
        try:
            self.conn.close()
            logger.info("🔌 Conexión a DB cerrada.")
        except sqlite3.Error as e:
            logger.warning(f"No se pudo cerrar la conexión: {e}")
        finally:
            self.conn = None
