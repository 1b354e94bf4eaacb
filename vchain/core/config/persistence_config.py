# vchain/core/config/persistence_config.py
import os
from typing import Dict, Any

from vchain.core.config.paths import Paths


class PersistenceConfig:
    """
    Configuración de Persistencia.
    Responsable de definir el motor y dónde se guardan las cadenas.
    """
    SUPPORTED_ENGINES = ("memory", "file", "sqlite")

    def __init__(self):
        self._storage_engine = os.getenv("VCH_STORAGE_ENGINE", "file").lower()
        self._db_name = os.getenv("VCH_DB_NAME", "chains.db")

        # Ruta centralizada de Paths (obedece VCH_DATA_DIR aunque cambie tras importar)
        Paths.refresh()
        self._data_dir = str(Paths.DATA_DIR)

    # --- Propiedades ---
    @property
    def storage_engine(self) -> str: return self._storage_engine
    @property
    def db_name(self) -> str: return self._db_name
    @property
    def data_dir(self) -> str: return self._data_dir

    @property
    def chains_dir(self) -> str:
        return os.path.join(self._data_dir, "chains")

    @property
    def db_path(self) -> str:
        """Ruta completa al archivo DB (data/db/<nombre>.db), salvo que sea absoluta."""
        if os.path.isabs(self._db_name):
            return self._db_name
        return os.path.join(self._data_dir, "db", self._db_name)

    def chain_directory(self, chain_name: str) -> str:
        return os.path.join(self.chains_dir, chain_name)

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Actualiza la configuración desde un diccionario externo (JSON)."""
        if not data: return

        if "engine" in data:
            self._storage_engine = str(data["engine"]).lower()

        if "data_dir" in data:
            self._data_dir = str(data["data_dir"])

        if "db_name" in data:
            self._db_name = str(data["db_name"])
