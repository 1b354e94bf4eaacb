# vchain/interface/api/dependencies.py
import logging
from typing import Optional

from vchain.core.models.chain import Chain

logger = logging.getLogger(__name__)


class ChainContainer:
    _instance: Optional[Chain] = None

    @classmethod
    def get_instance(cls) -> Chain:
        if cls._instance is None:
            logger.critical("🚨 ERROR DE ARRANQUE: La cadena no ha sido inicializada. Ejecute set_instance() primero.")
            raise RuntimeError("La cadena no ha sido inicializada. Ejecute set_instance() primero.")
        return cls._instance

    @classmethod
    def set_instance(cls, chain: Chain) -> None:
        if cls._instance is not None:
            logger.debug("Cadena ya inyectada. Ignorando set_instance.")
            return

        cls._instance = chain
        logger.info(f"✅ [API-DI] Cadena '{chain.name}' inyectada correctamente.")

    @classmethod
    async def shutdown(cls) -> None:
        if cls._instance is None:
            logger.debug("La cadena ya estaba cerrada.")
            return

        chain, cls._instance = cls._instance, None
        logger.info("🛑 [API] Cerrando la cadena...")
        await chain.close()


def get_chain_dependency() -> Chain:
    return ChainContainer.get_instance()
