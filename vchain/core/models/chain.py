# vchain/core/models/chain.py

import asyncio
import inspect
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from vchain.core.config.protocol_constants import ProtocolConstants
from vchain.core.errors import (
    ChainNotFoundError,
    HashNotFoundError,
    IndexNotFoundError,
    InvalidArgumentError,
    InvalidPreviousLinkError,
    NothingToRollbackError,
    StorageFailureError,
)
from vchain.core.interfaces.hasher_protocols import HashFunctionProtocol
from vchain.core.interfaces.i_storage import IChainStorage
from vchain.core.managers.autocommit_manager import AutocommitManager
from vchain.core.managers.chain_orderer import ChainOrderer
from vchain.core.models.block import Block
from vchain.core.models.operation_log import PendingOperation, PendingOperationLog
from vchain.core.models.records import ChainMetadata
from vchain.core.services.block_hasher import SHA256
from vchain.core.validators.chain_validator import ChainValidator

logger = logging.getLogger(__name__)

WalkOperation = Callable[[Block], Any]


class Chain:
    """
    Secuencia ordenada de bloques enlazados por hash + metadatos (name, height).

    Los bloques se guardan en un arreglo y se direccionan por posición y por
    hash; no hay referencias del bloque hacia la cadena. Toda operación que
    depende del orden fuerza primero el ordenamiento (single-flight).
    """

    def __init__(
        self,
        name: str = ProtocolConstants.DEFAULT_CHAIN_NAME,
        blocks: Optional[Iterable[Block]] = None,
        storage: Optional[IChainStorage] = None,
        hasher: HashFunctionProtocol = SHA256,
        autocommit: bool = False,
        autocommit_timeout_ms: int = ProtocolConstants.DEFAULT_AUTOCOMMIT_TIMER_MS,
        ordered: bool = False
    ) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("El nombre de la cadena debe ser un str no vacío.")

        block_list = list(blocks) if blocks is not None else []
        for i, block in enumerate(block_list):
            if not isinstance(block, Block):
                raise InvalidArgumentError(f"El elemento en la posición {i} no es una instancia de Block.")

        if autocommit and storage is None:
            raise InvalidArgumentError("El autocommit requiere un adaptador de almacenamiento.")

        self._name = name
        self._blocks: List[Block] = block_list
        self._storage = storage
        self._hasher = hasher
        self._ordered = ordered or not block_list
        self._ordering_task: Optional['asyncio.Task[None]'] = None
        self._log = PendingOperationLog()
        self._commit_lock = asyncio.Lock()
        self._autocommit: Optional[AutocommitManager] = (
            AutocommitManager(self.commit, autocommit_timeout_ms) if autocommit else None
        )
        self._autocommit_timeout_ms = autocommit_timeout_ms

    # --- Getters ---
    @property
    def name(self) -> str: return self._name
    @property
    def blocks(self) -> List[Block]: return list(self._blocks)
    @property
    def height(self) -> int: return len(self._blocks)
    @property
    def hasher(self) -> HashFunctionProtocol: return self._hasher
    @property
    def genesis_hash(self) -> str: return self._hasher.genesis_hash
    @property
    def storage(self) -> Optional[IChainStorage]: return self._storage
    @property
    def is_ordered(self) -> bool: return self._ordered
    @property
    def pending_operations(self) -> List[PendingOperation]: return self._log.snapshot()
    @property
    def autocommit(self) -> bool: return self._autocommit is not None
    @property
    def autocommit_timeout_ms(self) -> int: return self._autocommit_timeout_ms

    @property
    def last_autocommit_error(self) -> Optional[BaseException]:
        return self._autocommit.last_error if self._autocommit else None

    @property
    def is_closable(self) -> bool:
        """Indica si hay recursos de almacenamiento que liberar con close()."""
        return self._storage is not None

    @property
    def head(self) -> Optional[Block]:
        return self._blocks[-1] if self._blocks else None

    # ==========================================================================
    # ORDENAMIENTO
    # ==========================================================================

    async def order(self) -> List[Block]:
        """
        Ordena la cadena una sola vez. Los llamadores concurrentes comparten
        la misma tarea en vuelo; una vez ordenada, no se vuelve a ordenar.
        """
        if self._ordered:
            return self.blocks

        if self._ordering_task is None:
            self._ordering_task = asyncio.get_running_loop().create_task(self._run_ordering())

        task = self._ordering_task
        try:
            await asyncio.shield(task)
        finally:
            if self._ordering_task is task and task.done():
                self._ordering_task = None

        return self.blocks

    async def _run_ordering(self) -> None:
        # Se ordena una copia y se publica de una vez: nadie ve un arreglo a medias
        arranged = list(self._blocks)
        ChainOrderer.order_in_place(arranged, self.genesis_hash)
        self._blocks = arranged
        self._ordered = True
        logger.info(f"🔗 Cadena '{self._name}' ordenada ({len(arranged)} bloques).")

    # ==========================================================================
    # RECORRIDO
    # ==========================================================================

    async def walk(
        self,
        operation: Optional[WalkOperation] = None,
        start: Optional[str] = None,
        start_block: Optional[Block] = None,
        end: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Any]:
        """
        Recorre la cadena siguiendo los enlaces 'previous' desde 'start'
        (por defecto el centinela génesis) o desde 'start_block'.

        Aplica 'operation' (función o corrutina) a cada bloque y acumula los
        resultados. Se detiene al llegar a 'end' (incluido), al alcanzar
        'limit' resultados o cuando no hay sucesor: el fin de la cadena NO es
        un error.
        """
        results: List[Any] = []
        if limit is not None and limit <= 0:
            return results

        successors = self._index_by_previous()
        visited: Set[str] = set()

        if start_block is not None:
            block: Optional[Block] = start_block
        else:
            block = await self._find_successor(start if start is not None else self.genesis_hash, successors)

        while block is not None:
            if block.hash in visited:
                logger.warning(f"Ciclo de enlaces detectado en {block.hash[:12]}... Recorrido detenido.")
                break
            visited.add(block.hash)

            result: Any = block
            if operation is not None:
                result = operation(block)
                if inspect.isawaitable(result):
                    result = await result
            results.append(result)

            if end is not None and block.hash == end:
                break
            if limit is not None and len(results) >= limit:
                break

            block = await self._find_successor(block.hash, successors)

        return results

    def _index_by_previous(self) -> Dict[str, Block]:
        index: Dict[str, Block] = {}
        for block in self._blocks:
            index.setdefault(block.previous, block)
        return index

    async def _find_successor(self, previous: str, successors: Dict[str, Block]) -> Optional[Block]:
        """Punto de suspensión del recorrido; None marca el fin de la cadena."""
        return successors.get(previous)

    async def get(self, block_hash: Optional[str] = None, index: Optional[int] = None) -> Block:
        if block_hash is not None:
            await self.order()
            found = await self.walk(end=block_hash)
            if found and found[-1].hash == block_hash:
                return found[-1]
            raise HashNotFoundError(block_hash)

        if index is None:
            raise InvalidArgumentError("Debe indicar 'block_hash' o 'index'.")

        await self.order()
        if index < 0:
            raise IndexNotFoundError(index)
        found = await self.walk(limit=index + 1)
        if len(found) <= index:
            raise IndexNotFoundError(index)
        return found[index]

    # ==========================================================================
    # MUTACIÓN
    # ==========================================================================

    async def add(self, block: Block) -> Block:
        """
        Agrega un bloque validando su enlace contra la punta actual.
        No muta nada si la validación falla.
        """
        if not isinstance(block, Block):
            raise InvalidArgumentError("El parámetro no es una instancia de Block.")

        await self.order()

        head = self.head
        expected = head.hash if head is not None else self.genesis_hash
        if block.previous != expected:
            raise InvalidPreviousLinkError(
                f"Enlace inválido: se esperaba previous={expected[:12]}..., "
                f"se recibió {block.previous[:12]}..."
            )
        if not block.verify(quick=False):
            raise InvalidArgumentError("El hash del bloque no corresponde a su contenido.")

        position = len(self._blocks)
        self._blocks.append(block)
        self._log.record_add([block], [position])
        logger.info(f"✅ Bloque #{position} agregado a '{self._name}' ({block.hash[:12]}...).")

        self._schedule_autocommit()
        return block

    async def delete(
        self,
        index: Optional[int] = None,
        count: int = 1,
        block_hash: Optional[str] = None
    ) -> List[Block]:
        """Elimina un tramo contiguo (por posición o desde un hash) y lo registra."""
        if (index is None) == (block_hash is None):
            raise InvalidArgumentError("Indique exactamente uno de 'index' o 'block_hash'.")
        if not isinstance(count, int) or count < 1:
            raise InvalidArgumentError("'count' debe ser un entero positivo.")

        await self.order()

        if index is not None:
            if not 0 <= index < len(self._blocks):
                raise IndexNotFoundError(index)
            start = index
        else:
            position = self._position_of(block_hash) if block_hash is not None else None
            if position is None:
                raise HashNotFoundError(str(block_hash))
            start = position

        return self._truncate(start, start + count)

    def _position_of(self, block_hash: str) -> Optional[int]:
        return next((i for i, b in enumerate(self._blocks) if b.hash == block_hash), None)

    def _truncate(self, start: int, stop: Optional[int] = None) -> List[Block]:
        stop = len(self._blocks) if stop is None else min(stop, len(self._blocks))
        removed = self._blocks[start:stop]
        if not removed:
            return []

        del self._blocks[start:stop]
        self._log.record_delete(removed, range(start, start + len(removed)))
        logger.info(f"🗑️  {len(removed)} bloque(s) eliminados de '{self._name}' desde la posición {start}.")

        self._schedule_autocommit()
        return removed

    def _schedule_autocommit(self) -> None:
        if self._autocommit is not None:
            self._autocommit.schedule()

    # ==========================================================================
    # INTEGRIDAD
    # ==========================================================================

    async def verify(self, quick: bool = True) -> bool:
        """True solo si cada bloque y cada enlace (incluido el último) son consistentes."""
        await self.order()
        return ChainValidator.verify_chain(self._blocks, self.genesis_hash, quick)

    async def rollback(self, target_hash: Optional[str] = None) -> List[Block]:
        """
        Sin destino: elimina desde el primer bloque inválido o desenlazado
        hasta la punta. Con destino: conserva el bloque destino como nueva
        punta y elimina todo lo posterior. Retorna los bloques eliminados.
        """
        await self.order()

        if not self._blocks:
            return []

        if target_hash is None:
            first_bad = ChainValidator.first_invalid_index(self._blocks, self.genesis_hash, quick=False)
            if first_bad is None:
                raise NothingToRollbackError(f"La cadena '{self._name}' es íntegra; nada que deshacer.")
            logger.warning(f"⏪ Rollback de '{self._name}' desde el bloque inválido #{first_bad}.")
            return self._truncate(first_bad)

        target = self._position_of(target_hash)
        if target is None:
            raise HashNotFoundError(target_hash)

        logger.info(f"⏪ Rollback de '{self._name}' hasta el bloque #{target} ({target_hash[:12]}...).")
        return self._truncate(target + 1)

    # ==========================================================================
    # COMPARACIÓN
    # ==========================================================================

    async def diff(self, other: 'Chain', quick: bool = True) -> List[Optional[Block]]:
        """
        Diferencia asumiendo que una cadena es prefijo de la otra (si no lo
        es, el resultado es de mejor esfuerzo). Misma indexación que la
        cadena más larga: None = coincide, Block = divergencia.
        """
        if not isinstance(other, Chain):
            raise InvalidArgumentError("El parámetro 'other' no es una instancia de Chain.")

        await asyncio.gather(self.order(), other.order())

        mine, theirs = self._blocks, other._blocks
        if not mine or not theirs:
            return list(mine or theirs)

        longer, shorter = (mine, theirs) if len(mine) >= len(theirs) else (theirs, mine)

        start = next((i for i, b in enumerate(longer) if b.hash == shorter[0].hash), None)
        if start is None:
            return list(longer)

        result: List[Optional[Block]] = list(longer[:start])
        offset = 0
        while start + offset < len(longer) and offset < len(shorter):
            a, b = longer[start + offset], shorter[offset]
            if not a.equals(b, quick=quick):
                break
            result.append(None)
            offset += 1

        result.extend(longer[start + offset:])
        return result

    async def equals(self, other: 'Chain', quick: bool = True) -> bool:
        if not isinstance(other, Chain):
            raise InvalidArgumentError("El parámetro 'other' no es una instancia de Chain.")

        await asyncio.gather(self.order(), other.order())

        if len(self._blocks) != len(other._blocks):
            return False
        return all(a.equals(b, quick=quick) for a, b in zip(self._blocks, other._blocks))

    async def clone(self, name: Optional[str] = None, storage: Optional[IChainStorage] = None) -> 'Chain':
        """
        Cadena independiente: bloques copiados y bitácora vacía. El nombre
        por defecto es '<name>-CLONE'; no comparte el almacenamiento salvo
        que se pase uno explícitamente.
        """
        if not name or name == self._name:
            name = f"{self._name}{ProtocolConstants.CLONE_SUFFIX}"

        await self.order()

        return Chain(
            name=name,
            blocks=[b.copy() for b in self._blocks],
            storage=storage,
            hasher=self._hasher,
            autocommit=self.autocommit and storage is not None,
            autocommit_timeout_ms=self._autocommit_timeout_ms,
            ordered=True
        )

    # ==========================================================================
    # PERSISTENCIA
    # ==========================================================================

    def _require_storage(self) -> IChainStorage:
        if self._storage is None:
            raise StorageFailureError(f"La cadena '{self._name}' no tiene adaptador de almacenamiento.")
        return self._storage

    async def commit(self) -> Dict[str, List[str]]:
        """
        Reproduce la bitácora en el orden registrado y guarda los metadatos.
        Los commits se serializan; si uno falla, lo no aplicado queda en la
        bitácora y viaja en StorageFailureError.unapplied.
        """
        storage = self._require_storage()

        async with self._commit_lock:
            pending = len(self._log)
            result = await self._log.replay(storage)
            metadata = ChainMetadata(name=self._name, height=len(self._blocks))
            await storage.save_chain_metadata(metadata.to_dict())

        logger.info(
            f"💾 Commit de '{self._name}': {pending} operación(es), "
            f"+{len(result['added'])} / -{len(result['deleted'])} bloques."
        )
        return result

    async def load(self) -> 'Chain':
        """Carga metadatos y el conjunto (desordenado) de bloques y lo ordena."""
        storage = self._require_storage()

        if self._log:
            raise InvalidArgumentError("Hay operaciones sin confirmar; ejecute commit() antes de load().")

        metadata = await storage.load_chain_metadata(self._name)
        records = await storage.list_blocks()

        if metadata is None and not records:
            raise ChainNotFoundError(self._name)

        blocks = [Block.from_dict(record, hasher=self._hasher) for record in records]

        self._blocks = blocks
        self._ordered = not blocks
        self._ordering_task = None
        await self.order()

        if metadata is not None and metadata.get("height") != len(blocks):
            logger.warning(
                f"⚠️ Altura registrada ({metadata.get('height')}) distinta de los "
                f"bloques cargados ({len(blocks)}) en '{self._name}'."
            )

        logger.info(f"📂 Cadena '{self._name}' cargada: {len(blocks)} bloques.")
        return self

    async def close(self) -> None:
        """Confirma lo pendiente y libera el almacenamiento."""
        if self._autocommit is not None:
            self._autocommit.cancel()
            await self._autocommit.wait_idle()

        if self._storage is None:
            return

        try:
            if self._log:
                await self.commit()
        finally:
            await self._storage.close()
            logger.info(f"🔌 Cadena '{self._name}' cerrada.")

    # ==========================================================================
    # SERIALIZACIÓN
    # ==========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "height": len(self._blocks),
            "blocks": [b.to_dict() for b in self._blocks]
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))

    def __len__(self) -> int:
        return len(self._blocks)

    def __repr__(self) -> str:
        state = "ordered" if self._ordered else "unordered"
        return f"Chain(name={self._name!r}, height={len(self._blocks)}, {state}, pending={len(self._log)})"
