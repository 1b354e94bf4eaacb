# vchain/core/interfaces/i_storage.py

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

# NOTA: el contrato trabaja con registros crudos (Dicts), no con Block,
# para evitar dependencias circulares con los modelos.


class IChainStorage(ABC):
    """
    Contrato Polimórfico del adaptador de almacenamiento.
    El motor solo lo invoca durante walk, commit y load. Todas las
    operaciones son corrutinas: cada llamada es un punto de suspensión.
    """

    async def connect(self) -> None:
        """Abre los recursos del backend (conexión, directorio)."""

    async def close(self) -> None:
        """Libera los recursos del backend."""

    async def __aenter__(self) -> 'IChainStorage':
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @abstractmethod
    async def find_block(
        self,
        block_hash: Optional[str] = None,
        index: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Recupera el registro de un bloque por hash o por posición.
        Retorna None si no existe (NotFound).
        Chain no lo usa: trabaja sobre los bloques cargados con list_blocks()
        y sus pendientes en memoria, que pueden diferir de lo guardado. Es el
        acceso puntual al backend para herramientas de inspección.
        """

    @abstractmethod
    async def list_blocks(self) -> List[Dict[str, Any]]:
        """Todos los registros guardados, en orden NO garantizado."""

    @abstractmethod
    async def persist_block(self, block_data: Dict[str, Any], position: int) -> str:
        """
        Guarda (o reemplaza) un bloque.
        Recibe: registro serializado y la posición sugerida.
        Retorna: identificador opaco del registro.
        """

    @abstractmethod
    async def delete_block(self, block_hash: str) -> str:
        """Elimina un bloque. Eliminar uno inexistente no es error."""

    @abstractmethod
    async def load_chain_metadata(self, name: str) -> Optional[Dict[str, Any]]:
        """Retorna {name, height} o None si la cadena no existe."""

    @abstractmethod
    async def save_chain_metadata(self, metadata: Dict[str, Any]) -> bool:
        """Guarda {name, height}."""
