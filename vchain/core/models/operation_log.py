# vchain/core/models/operation_log.py

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from vchain.core.config.protocol_constants import ChainOperation
from vchain.core.errors import StorageFailureError
from vchain.core.interfaces.i_storage import IChainStorage
from vchain.core.models.block import Block

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingOperation:
    kind: ChainOperation
    blocks: Tuple[Block, ...]
    # Posición de cada bloque en la cadena al momento de registrarse
    positions: Tuple[int, ...]

    def describe(self) -> str:
        return f"{self.kind.name}({len(self.blocks)})"


class PendingOperationLog:
    """
    Bitácora ordenada de operaciones ADD/DELETE aún no persistidas.
    Se reproduce en el MISMO orden de registro contra el almacenamiento.
    """

    def __init__(self) -> None:
        self._operations: List[PendingOperation] = []

    def record_add(self, blocks: Sequence[Block], positions: Sequence[int]) -> PendingOperation:
        return self._record(ChainOperation.ADD, blocks, positions)

    def record_delete(self, blocks: Sequence[Block], positions: Sequence[int]) -> PendingOperation:
        return self._record(ChainOperation.DELETE, blocks, positions)

    def _record(self, kind: ChainOperation, blocks: Sequence[Block], positions: Sequence[int]) -> PendingOperation:
        operation = PendingOperation(kind=kind, blocks=tuple(blocks), positions=tuple(positions))
        self._operations.append(operation)
        logger.debug(f"Operación pendiente registrada: {operation.describe()}")
        return operation

    def peek(self) -> Optional[PendingOperation]:
        return self._operations[0] if self._operations else None

    def snapshot(self) -> List[PendingOperation]:
        return list(self._operations)

    def clear(self) -> None:
        self._operations.clear()

    async def replay(self, storage: IChainStorage) -> Dict[str, List[str]]:
        """
        Aplica cada operación en orden y la retira de la bitácora solo cuando
        todos sus bloques quedaron aplicados. Ante un fallo, las operaciones
        no aplicadas permanecen para reintento y se adjuntan al error.
        """
        added: List[str] = []
        deleted: List[str] = []

        while self._operations:
            operation = self._operations[0]
            try:
                for block, position in zip(operation.blocks, operation.positions):
                    if operation.kind == ChainOperation.ADD:
                        added.append(await storage.persist_block(block.to_dict(), position))
                    else:
                        deleted.append(await storage.delete_block(block.hash))
            except Exception as e:
                remaining = self.snapshot()
                logger.error(
                    f"❌ Commit parcial: falló {operation.describe()}. "
                    f"{len(remaining)} operación(es) quedan pendientes."
                )
                cause = e.cause if isinstance(e, StorageFailureError) and e.cause else e
                raise StorageFailureError(
                    f"Fallo aplicando {operation.describe()}: {e}",
                    cause=cause,
                    unapplied=remaining
                ) from e

            self._operations.pop(0)

        return {"added": added, "deleted": deleted}

    def __len__(self) -> int:
        return len(self._operations)

    def __bool__(self) -> bool:
        return bool(self._operations)
