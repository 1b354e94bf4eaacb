# vchain/core/models/block.py

import copy
import json
import logging
import secrets
import threading
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from vchain.core.builders.block_miner import BlockMiner
from vchain.core.config.protocol_constants import ProtocolConstants
from vchain.core.errors import InvalidArgumentError, MalformedBlockError
from vchain.core.interfaces.hasher_protocols import HashFunctionProtocol
from vchain.core.models.records import BlockRecord
from vchain.core.services.block_hasher import SHA256

logger = logging.getLogger(__name__)

BlockComparator = Callable[['Block', 'Block', bool], bool]


class Block:
    """
    Unidad inmutable una vez minada: payload, enlace al hash previo, salt,
    nonce y el hash resultante.

    Si se pasa block_hash (registro de confianza recién deserializado) no se
    mina; en cualquier otro caso el hash se calcula al construir.
    """

    def __init__(
        self,
        payload: Any = None,
        previous: Optional[str] = None,
        salt: Optional[str] = None,
        hasher: HashFunctionProtocol = SHA256,
        nonce: Optional[int] = None,
        block_hash: Optional[str] = None,
        max_nonce: int = ProtocolConstants.MAX_NONCE,
        interrupt_event: Optional[threading.Event] = None
    ) -> None:
        if previous is None:
            previous = hasher.genesis_hash
        if not isinstance(previous, str) or not previous:
            raise InvalidArgumentError("'previous' debe ser un hash hexadecimal (str).")
        if salt is None:
            salt = secrets.token_hex(ProtocolConstants.SALT_BYTES)
        if not isinstance(salt, str):
            raise InvalidArgumentError("'salt' debe ser un str.")

        self._hasher = hasher
        self._payload: Any = copy.deepcopy(payload) if payload is not None else []
        self._previous = previous
        self._salt = salt
        self._max_nonce = max_nonce
        self._nonce = -1
        self._hash = ""

        if block_hash is not None:
            if not isinstance(nonce, int) or isinstance(nonce, bool):
                raise InvalidArgumentError("Un bloque con hash explícito requiere su nonce (int).")
            self._nonce = nonce
            self._hash = block_hash
        else:
            self._mine(interrupt_event)

    # --- Getters ---
    @property
    def payload(self) -> Any: return copy.deepcopy(self._payload)
    @property
    def previous(self) -> str: return self._previous
    @property
    def salt(self) -> str: return self._salt
    @property
    def nonce(self) -> int: return self._nonce
    @property
    def hash(self) -> str: return self._hash
    @property
    def hasher(self) -> HashFunctionProtocol: return self._hasher

    # --- Mutación explícita (re-mina) ---

    def set_payload(self, payload: Any, interrupt_event: Optional[threading.Event] = None) -> None:
        """Reemplaza el payload y vuelve a minar. El hash anterior deja de valer."""
        previous_payload = self._payload
        self._payload = copy.deepcopy(payload) if payload is not None else []
        try:
            self._mine(interrupt_event)
        except Exception:
            # nonce y hash solo cambian si el minado termina
            self._payload = previous_payload
            raise

    def set_previous(self, previous: str, interrupt_event: Optional[threading.Event] = None) -> None:
        if not isinstance(previous, str) or not previous:
            raise InvalidArgumentError("'previous' debe ser un hash hexadecimal (str).")
        if previous == self._previous:
            return
        old_previous = self._previous
        self._previous = previous
        try:
            self._mine(interrupt_event)
        except Exception:
            self._previous = old_previous
            raise

    def _mine(self, interrupt_event: Optional[threading.Event] = None) -> None:
        self._nonce, self._hash = BlockMiner.mine(
            payload=self._payload,
            previous=self._previous,
            salt=self._salt,
            hasher=self._hasher,
            max_nonce=self._max_nonce,
            interrupt_event=interrupt_event
        )

    # --- Verificación ---

    def verify(self, quick: bool = True) -> bool:
        """
        quick=True: solo revisa el sufijo de dificultad (O(1), débil ante
        manipulación del payload). quick=False: recalcula el hash completo.
        Nunca lanza excepción.
        """
        try:
            if not isinstance(self._hash, str):
                return False
            if quick:
                return self._hash.endswith(ProtocolConstants.DIFFICULTY_SUFFIX)
            computed = self._hasher.calculate(self._payload, self._nonce, self._previous, self._salt)
            return computed == self._hash
        except Exception:
            logger.warning(f"Bloque {self._hash!r:.16} no verificable.", exc_info=True)
            return False

    def equals(
        self,
        other: 'Block',
        quick: bool = True,
        comparator: Optional[BlockComparator] = None
    ) -> bool:
        if not isinstance(other, Block):
            raise InvalidArgumentError("El bloque a comparar no es una instancia de Block.")
        if comparator is None:
            comparator = Block._default_comparator
        return comparator(self, other, quick)

    @staticmethod
    def _default_comparator(a: 'Block', b: 'Block', quick: bool) -> bool:
        if quick:
            return a.hash == b.hash
        return a.to_json() == b.to_json()

    # --- Serialización ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": copy.deepcopy(self._payload),
            "hash": self._hash,
            "nonce": self._nonce,
            "previous": self._previous,
            "salt": self._salt
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))

    @staticmethod
    def from_dict(data: Any, hasher: HashFunctionProtocol = SHA256) -> 'Block':
        """Reconstruye un Block desde su registro en reposo, sin minar."""
        if not isinstance(data, dict):
            raise MalformedBlockError("El registro del bloque debe ser un objeto.")
        try:
            record = BlockRecord.model_validate(data)
        except ValidationError as e:
            raise MalformedBlockError(f"Registro de bloque inválido: {e.error_count()} error(es).") from e

        return Block(
            payload=record.data,
            previous=record.previous,
            salt=record.salt,
            hasher=hasher,
            nonce=record.nonce,
            block_hash=record.block_hash
        )

    @staticmethod
    def from_json(raw: str, hasher: HashFunctionProtocol = SHA256) -> 'Block':
        if not isinstance(raw, str) or not raw:
            raise MalformedBlockError("No se recibieron datos.")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedBlockError(f"JSON de bloque ilegible: {e}") from e
        return Block.from_dict(data, hasher=hasher)

    def copy(self) -> 'Block':
        """Copia independiente con los mismos campos (no vuelve a minar)."""
        return Block(
            payload=self._payload,
            previous=self._previous,
            salt=self._salt,
            hasher=self._hasher,
            nonce=self._nonce,
            block_hash=self._hash,
            max_nonce=self._max_nonce
        )

    def __repr__(self) -> str:
        return f"Block(hash={self._hash[:12]}..., previous={self._previous[:12]}..., nonce={self._nonce})"
