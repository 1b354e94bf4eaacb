# vchain/core/builders/block_builder.py

import logging
import threading
from typing import Any, Optional

from vchain.core.config.config_manager import ConfigManager
from vchain.core.interfaces.hasher_protocols import HashFunctionProtocol
from vchain.core.models.block import Block
from vchain.core.models.chain import Chain
from vchain.core.services.block_hasher import SHA256

logger = logging.getLogger(__name__)


class BlockBuilder:

    @staticmethod
    def build(
        payload: Any,
        previous: Optional[str] = None,
        hasher: HashFunctionProtocol = SHA256,
        interrupt_event: Optional[threading.Event] = None
    ) -> Block:
        """Mina un bloque respetando el límite de nonce configurado."""
        config = ConfigManager().chain
        block = Block(
            payload=payload,
            previous=previous,
            hasher=hasher,
            max_nonce=config.max_nonce,
            interrupt_event=interrupt_event
        )
        logger.info(f"⛏️  Bloque sellado: {block.hash[:12]}... (nonce {block.nonce})")
        return block

    @staticmethod
    async def build_next(
        chain: Chain,
        payload: Any,
        interrupt_event: Optional[threading.Event] = None
    ) -> Block:
        """Mina un bloque que enlaza con la punta actual de la cadena (sin agregarlo)."""
        await chain.order()
        head = chain.head
        previous = head.hash if head is not None else chain.genesis_hash
        return BlockBuilder.build(payload, previous, chain.hasher, interrupt_event)
