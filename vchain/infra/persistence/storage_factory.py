# vchain/infra/persistence/storage_factory.py

import logging
from typing import Optional

from vchain.core.config.config_manager import ConfigManager
from vchain.core.errors import InvalidArgumentError
from vchain.core.interfaces.i_storage import IChainStorage

from vchain.infra.persistence.database_manager import DatabaseManager
from vchain.infra.persistence.file.file_storage import FileStorage
from vchain.infra.persistence.memory.memory_storage import MemoryStorage
from vchain.infra.persistence.sqlite.sqlite_storage import SqliteStorage

logger = logging.getLogger(__name__)


class StorageFactory:

    @staticmethod
    def create(
        chain_name: str,
        engine: Optional[str] = None,
        location: Optional[str] = None
    ) -> IChainStorage:
        """
        Crea el adaptador para una cadena.
        engine: 'memory' | 'file' | 'sqlite' (por defecto, el configurado).
        location: directorio (file) o ruta de la DB (sqlite); por defecto, el configurado.
        """
        config = ConfigManager()
        storage_type = (engine or config.persistence.storage_engine).lower()

        logger.info(f"🏗️  Almacenamiento de '{chain_name}': {storage_type.upper()}")

        if storage_type == "memory":
            return MemoryStorage()
        elif storage_type == "file":
            directory = location or config.persistence.chain_directory(chain_name)
            return FileStorage(directory)
        elif storage_type == "sqlite":
            db_path = location or config.persistence.db_path
            return SqliteStorage(DatabaseManager(db_path), chain_name)
        else:
            error_msg = f"Motor '{storage_type}' no soportado."
            logger.error(f"❌ {error_msg}")
            raise InvalidArgumentError(error_msg)
