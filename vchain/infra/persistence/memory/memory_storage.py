# vchain/infra/persistence/memory/memory_storage.py

import copy
import logging
from typing import Any, Dict, List, Optional

from vchain.core.interfaces.i_storage import IChainStorage

logger = logging.getLogger(__name__)


class MemoryStorage(IChainStorage):
    """
    Almacenamiento volátil en diccionarios.
    Útil para pruebas y para cadenas que no necesitan sobrevivir al proceso.
    """

    def __init__(self) -> None:
        self._blocks: Dict[str, Dict[str, Any]] = {}
        self._positions: Dict[str, int] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}
        self._closed = False

    @property
    def is_closed(self) -> bool: return self._closed

    async def connect(self) -> None:
        self._closed = False

    async def close(self) -> None:
        self._closed = True
        logger.debug("MemoryStorage cerrado.")

    async def find_block(
        self,
        block_hash: Optional[str] = None,
        index: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        if block_hash is not None:
            record = self._blocks.get(block_hash)
            return copy.deepcopy(record) if record else None

        if index is not None:
            for stored_hash, position in self._positions.items():
                if position == index:
                    return copy.deepcopy(self._blocks[stored_hash])
        return None

    async def list_blocks(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(record) for record in self._blocks.values()]

    async def persist_block(self, block_data: Dict[str, Any], position: int) -> str:
        block_hash = block_data["hash"]
        self._blocks[block_hash] = copy.deepcopy(block_data)
        self._positions[block_hash] = position
        return block_hash

    async def delete_block(self, block_hash: str) -> str:
        self._blocks.pop(block_hash, None)
        self._positions.pop(block_hash, None)
        return block_hash

    async def load_chain_metadata(self, name: str) -> Optional[Dict[str, Any]]:
        metadata = self._metadata.get(name)
        return dict(metadata) if metadata else None

    async def save_chain_metadata(self, metadata: Dict[str, Any]) -> bool:
        self._metadata[metadata["name"]] = dict(metadata)
        return True
