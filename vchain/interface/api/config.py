# vchain/interface/api/config.py

import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiConfig:
    host: str
    port: int
    title: str
    version: str
    debug_mode: bool

    @classmethod
    def load(cls) -> 'ApiConfig':

        host = os.getenv("VCH_API_HOST", "127.0.0.1")
        port = int(os.getenv("VCH_API_PORT", 8080))
        title = os.getenv("VCH_API_TITLE", "vchain Inspection API")
        version = "0.1.0"
        debug = os.getenv("VCH_DEBUG", "False").lower() == "true"

        config = cls(
            host=host,
            port=port,
            title=title,
            version=version,
            debug_mode=debug
        )

        logger.info("⚙️  Configuración de la API cargada:")
        logger.info(f"   URL: http://{config.host}:{config.port}")
        logger.info(f"   Título: {config.title} v{config.version}")
        logger.debug(f"   Debug: {config.debug_mode}")

        return config


# Instancia inmutable
settings = ApiConfig.load()
