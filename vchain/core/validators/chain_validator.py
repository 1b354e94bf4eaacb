# vchain/core/validators/chain_validator.py

import logging
from typing import Optional, Sequence

from vchain.core.models.block import Block

logger = logging.getLogger(__name__)


class ChainValidator:

    @staticmethod
    def is_linked(blocks: Sequence[Block], position: int, genesis_hash: str) -> bool:
        """El bloque en 'position' apunta al hash de su predecesor (o al génesis)."""
        expected = genesis_hash if position == 0 else blocks[position - 1].hash
        return blocks[position].previous == expected

    @staticmethod
    def first_invalid_index(
        blocks: Sequence[Block],
        genesis_hash: str,
        quick: bool = False
    ) -> Optional[int]:
        """
        Primera posición cuyo bloque no verifica o cuyo enlace está roto.
        None si toda la cadena (incluido el último bloque) es consistente.
        """
        for i, block in enumerate(blocks):
            if not block.verify(quick):
                logger.info(f"Bloque #{i} inválido: el hash no corresponde a su contenido.")
                return i

            if not ChainValidator.is_linked(blocks, i, genesis_hash):
                logger.info(f"Quiebre de enlace en bloque #{i}: Hash previo incorrecto.")
                return i

        return None

    @staticmethod
    def verify_chain(blocks: Sequence[Block], genesis_hash: str, quick: bool = True) -> bool:
        valid = ChainValidator.first_invalid_index(blocks, genesis_hash, quick) is None
        if valid:
            logger.debug(f"Integridad de cadena verificada ({len(blocks)} bloques).")
        return valid
