# vchain/infra/persistence/file/file_storage.py

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from vchain.core.config.protocol_constants import ProtocolConstants
from vchain.core.errors import StorageFailureError
from vchain.core.interfaces.i_storage import IChainStorage

logger = logging.getLogger(__name__)

# <posición>.<hash>; el hash siempre termina en el sufijo de dificultad
_BLOCK_FILE = re.compile(r"^(\d+)\.([0-9a-f]+" + ProtocolConstants.DIFFICULTY_SUFFIX + r")$", re.IGNORECASE)


class FileStorage(IChainStorage):
    """
    Un directorio por cadena: un archivo JSON por bloque, llamado
    '<posición>.<hash>', y 'chain.json' con los metadatos {name, height}.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path: return self._directory

    async def connect(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"❌ No se pudo crear el directorio {self._directory}: {e}")
            raise StorageFailureError(f"Directorio inaccesible: {self._directory}", cause=e) from e

    async def close(self) -> None:
        logger.debug(f"FileStorage liberado ({self._directory}).")

    # --- Helpers ---

    def _block_files(self) -> List[Path]:
        if not self._directory.exists():
            return []
        try:
            return [p for p in self._directory.iterdir() if p.is_file() and _BLOCK_FILE.match(p.name)]
        except OSError as e:
            raise StorageFailureError(f"No se pudo listar {self._directory}", cause=e) from e

    def _files_for_hash(self, block_hash: str) -> List[Path]:
        return [p for p in self._block_files() if p.name.split('.', 1)[1].lower() == block_hash.lower()]

    def _read(self, path: Path) -> Dict[str, Any]:
        try:
            return json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ Bloque ilegible en disco: {path.name}")
            raise StorageFailureError(f"No se pudo leer {path}", cause=e) from e

    # --- Contrato ---

    async def find_block(
        self,
        block_hash: Optional[str] = None,
        index: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        for path in self._block_files():
            position, stored_hash = path.name.split('.', 1)

            if block_hash is not None and stored_hash.lower() == block_hash.lower():
                return self._read(path)
            if block_hash is None and index is not None and int(position) == index:
                return self._read(path)
        return None

    async def list_blocks(self) -> List[Dict[str, Any]]:
        return [self._read(path) for path in self._block_files()]

    async def persist_block(self, block_data: Dict[str, Any], position: int) -> str:
        await self.connect()
        block_hash = block_data["hash"]
        target = self._directory / f"{position}.{block_hash}"

        try:
            # Un mismo hash guardado en otra posición se reemplaza
            for stale in self._files_for_hash(block_hash):
                if stale != target:
                    stale.unlink(missing_ok=True)
            target.write_text(json.dumps(block_data, sort_keys=True), encoding='utf-8')
        except OSError as e:
            logger.error(f"❌ Error escribiendo bloque {block_hash[:12]}...: {e}")
            raise StorageFailureError(f"No se pudo escribir {target}", cause=e) from e

        return str(target)

    async def delete_block(self, block_hash: str) -> str:
        removed = self._files_for_hash(block_hash)
        try:
            for path in removed:
                path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"❌ Error eliminando bloque {block_hash[:12]}...: {e}")
            raise StorageFailureError(f"No se pudo eliminar el bloque {block_hash}", cause=e) from e

        return str(removed[0]) if removed else block_hash

    async def load_chain_metadata(self, name: str) -> Optional[Dict[str, Any]]:
        path = self._directory / ProtocolConstants.METADATA_FILENAME
        if not path.exists():
            return None

        metadata = self._read(path)
        if metadata.get("name") != name:
            logger.warning(f"⚠️ {path} pertenece a la cadena '{metadata.get('name')}', no a '{name}'.")
            return None
        return metadata

    async def save_chain_metadata(self, metadata: Dict[str, Any]) -> bool:
        await self.connect()
        path = self._directory / ProtocolConstants.METADATA_FILENAME
        try:
            path.write_text(json.dumps(metadata, sort_keys=True), encoding='utf-8')
        except OSError as e:
            raise StorageFailureError(f"No se pudieron guardar los metadatos en {path}", cause=e) from e
        return True
