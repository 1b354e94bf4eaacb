# vchain/core/factories/chain_factory.py

import logging
from typing import Optional

from vchain.core.config.config_manager import ConfigManager
from vchain.core.errors import ChainNotFoundError, StorageFailureError
from vchain.core.models.chain import Chain
from vchain.core.services.block_hasher import get_hasher
from vchain.infra.persistence.storage_factory import StorageFactory

logger = logging.getLogger(__name__)


class ChainFactory:
    """
    Fábrica de cadenas.
    Ensambla Chain + adaptador de almacenamiento a partir de la configuración.
    """

    @staticmethod
    def create_chain(
        name: Optional[str] = None,
        engine: Optional[str] = None,
        location: Optional[str] = None
    ) -> Chain:
        config = ConfigManager()
        chain_name = name or config.chain.name
        storage = StorageFactory.create(chain_name, engine=engine, location=location)

        # Sin persistencia real no hay nada que autoconfirmar
        autocommit = config.chain.autocommit and (engine or config.storage_engine) != "memory"

        logger.info(f"🏭 ChainFactory: cadena '{chain_name}' ({type(storage).__name__}).")
        return Chain(
            name=chain_name,
            storage=storage,
            hasher=get_hasher(config.chain.hash_algorithm),
            autocommit=autocommit,
            autocommit_timeout_ms=config.chain.autocommit_timeout_ms
        )

    @staticmethod
    async def open_chain(
        name: Optional[str] = None,
        engine: Optional[str] = None,
        location: Optional[str] = None
    ) -> Chain:
        """Conecta el almacenamiento y carga la cadena; si no existe, la deja vacía."""
        chain = ChainFactory.create_chain(name, engine, location)
        if chain.storage is None:
            raise StorageFailureError(f"La cadena '{chain.name}' no tiene adaptador de almacenamiento.")
        await chain.storage.connect()

        try:
            await chain.load()
        except ChainNotFoundError:
            logger.info(f"Cadena '{chain.name}' inexistente. Se creará una nueva con el mismo nombre.")

        return chain
