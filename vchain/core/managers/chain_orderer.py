# vchain/core/managers/chain_orderer.py

import logging
from typing import List

from vchain.core.errors import NoGenesisBlockError
from vchain.core.models.block import Block

logger = logging.getLogger(__name__)


class ChainOrderer:

    @staticmethod
    def order_in_place(blocks: List[Block], genesis_hash: str) -> List[int]:
        """
        Reacomoda un conjunto de bloques en orden génesis -> punta.

        1. Lleva a la posición 0 el bloque que apunta al centinela génesis.
        2. Para cada i, si blocks[i+1] no enlaza con blocks[i], busca más
           adelante el sucesor y lo intercambia. Si no existe, la posición
           queda sin resolver (quiebre real, lo reporta verify).

        O(n²) en el peor caso. Retorna las posiciones sin resolver.
        """
        if not blocks:
            return []

        genesis_index = next(
            (i for i, block in enumerate(blocks) if block.previous == genesis_hash),
            None
        )
        if genesis_index is None:
            logger.warning(f"Orden imposible: ninguno de {len(blocks)} bloques enlaza al génesis.")
            raise NoGenesisBlockError("Ningún bloque tiene como 'previous' el centinela génesis.")

        blocks[0], blocks[genesis_index] = blocks[genesis_index], blocks[0]

        unresolved: List[int] = []
        for i in range(len(blocks) - 1):
            current_hash = blocks[i].hash
            if blocks[i + 1].previous == current_hash:
                continue

            successor = next(
                (j for j in range(i + 2, len(blocks)) if blocks[j].previous == current_hash),
                None
            )
            if successor is None:
                unresolved.append(i + 1)
                continue

            blocks[i + 1], blocks[successor] = blocks[successor], blocks[i + 1]

        if unresolved:
            logger.info(f"Quiebre de enlace en posición(es) {unresolved} tras ordenar.")

        return unresolved
