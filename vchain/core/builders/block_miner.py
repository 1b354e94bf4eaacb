# vchain/core/builders/block_miner.py

import time
import logging
import threading
from typing import Any, Optional, Tuple

from vchain.core.config.protocol_constants import ProtocolConstants
from vchain.core.errors import MiningExhaustedError, MiningInterruptedError
from vchain.core.interfaces.hasher_protocols import HashFunctionProtocol

logger = logging.getLogger(__name__)


class BlockMiner:

    @staticmethod
    def mine(
        payload: Any,
        previous: str,
        salt: str,
        hasher: HashFunctionProtocol,
        max_nonce: int = ProtocolConstants.MAX_NONCE,
        interrupt_event: Optional[threading.Event] = None
    ) -> Tuple[int, str]:
        """
        Búsqueda exhaustiva del menor nonce cuyo hash termina en el sufijo
        de dificultad. Mismas entradas => mismo (nonce, hash).

        Si se pasa interrupt_event, se revisa en cada intento (cancelación cooperativa).
        """
        digest = hasher.bind(payload, previous, salt)
        suffix = ProtocolConstants.DIFFICULTY_SUFFIX

        nonce = 0
        start_time = time.time()

        while nonce <= max_nonce:

            if interrupt_event is not None and interrupt_event.is_set():
                logger.info(f"Minería interrumpida en nonce {nonce}.")
                raise MiningInterruptedError(f"Minado cancelado en nonce {nonce}.")

            block_hash = digest(nonce)

            if block_hash.endswith(suffix):
                elapsed = time.time() - start_time
                hash_power = nonce / elapsed if elapsed > 0 else 0

                logger.debug(
                    f"Bloque minado. "
                    f"Hash: {block_hash[:10]}... | "
                    f"Nonce: {nonce} | "
                    f"Vel: {hash_power:.0f} h/s"
                )
                return nonce, block_hash

            nonce += 1

        logger.info(f"Minería fallida: Rango de nonce agotado ({max_nonce}).")
        raise MiningExhaustedError(f"Ningún nonce en [0, {max_nonce}] cumple la dificultad.")
