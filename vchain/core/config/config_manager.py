# vchain/core/config/config_manager.py
'''
class ConfigManager:
    Centraliza el acceso a la configuración de la cadena y de la persistencia,
    cargando valores desde el entorno (.env) o desde un JSON.

    Methods:
        __new__(cls): Patrón Singleton para asegurar una única instancia.
        _initialize(self): Carga las sub-configuraciones con valores por defecto/entorno.
        load_from_json_dict(self, json_data: Dict[str, Any]) -> None: Actualiza las sub-configuraciones desde un JSON completo.
        reset(cls): Descarta la instancia (pruebas o recarga del entorno).
'''

from dotenv import load_dotenv
from typing import Dict, Any

# Cargar variables de entorno si existen
load_dotenv()

from vchain.core.config.chain_config import ChainConfig
from vchain.core.config.persistence_config import PersistenceConfig


class ConfigManager:

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self._chain = ChainConfig()              # Reglas de la cadena
        self._persistence = PersistenceConfig()  # Motor de almacenamiento

    def load_from_json_dict(self, json_data: Dict[str, Any]) -> None:

        if "chain" in json_data:
            self._chain.update_from_dict(json_data["chain"])

        if "storage" in json_data:
            self._persistence.update_from_dict(json_data["storage"])

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    # --- ACCESORES ---

    @property
    def chain(self) -> ChainConfig:
        return self._chain

    @property
    def persistence(self) -> PersistenceConfig:
        return self._persistence

    # --- Atajos ---

    @property
    def storage_engine(self) -> str: return self._persistence.storage_engine
    @property
    def chain_name(self) -> str: return self._chain.name
