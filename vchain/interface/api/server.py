# vchain/interface/api/server.py

import sys
import os
import logging
from typing import List, Optional

# --- Configuración de Path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, '../../..'))
if project_root not in sys.path: sys.path.insert(0, project_root)

# --- Framework Imports ---
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

# --- Project Imports ---
from vchain.interface.api import schemas
from vchain.interface.api.dependencies import ChainContainer, get_chain_dependency
from vchain.interface.api.config import settings
from vchain.core.builders.block_builder import BlockBuilder
from vchain.core.errors import (
    ChainError, HashNotFoundError, IndexNotFoundError, InvalidArgumentError,
    InvalidPreviousLinkError, MiningExhaustedError, NothingToRollbackError,
    StorageFailureError
)
from vchain.core.factories.chain_factory import ChainFactory
from vchain.core.models.block import Block
from vchain.core.models.chain import Chain

logger = logging.getLogger(__name__)


def to_http_error(error: ChainError) -> HTTPException:
    """Traduce la taxonomía del motor a códigos HTTP."""
    if isinstance(error, (HashNotFoundError, IndexNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (InvalidPreviousLinkError, NothingToRollbackError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, InvalidArgumentError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, MiningExhaustedError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, StorageFailureError):
        logger.error(f"Fallo de almacenamiento expuesto por la API: {error}")
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))

# ==============================================================================
# 🏗️ SERVICE LAYER
# ==============================================================================

class ChainService:
    def __init__(self, chain: Chain):
        self.chain = chain

    async def get_status(self) -> schemas.ChainStatusResponse:
        head = self.chain.head
        return schemas.ChainStatusResponse(
            name=self.chain.name,
            height=self.chain.height,
            head=head.hash if head else None,
            is_valid=await self.chain.verify(quick=True),
            pending_operations=len(self.chain.pending_operations)
        )

    async def list_blocks(self, limit: Optional[int] = None) -> List[schemas.BlockResponse]:
        blocks = await self.chain.walk(limit=limit)
        return [self._to_response(i, b) for i, b in enumerate(blocks)]

    async def get_block(self, block_hash: str) -> schemas.BlockResponse:
        block = await self.chain.get(block_hash=block_hash)
        blocks = self.chain.blocks
        index = next(i for i, b in enumerate(blocks) if b.hash == block.hash)
        return self._to_response(index, block)

    async def mine_block(self, req: schemas.BlockCreateRequest) -> schemas.BlockResponse:
        await self.chain.order()
        head = self.chain.head
        previous = head.hash if head else self.chain.genesis_hash

        # El minado es CPU puro: fuera del event loop
        block = await run_in_threadpool(BlockBuilder.build, req.data, previous, self.chain.hasher)
        await self.chain.add(block)
        return self._to_response(self.chain.height - 1, block)

    async def verify(self, quick: bool) -> schemas.VerifyResponse:
        return schemas.VerifyResponse(quick=quick, is_valid=await self.chain.verify(quick=quick))

    async def rollback(self, req: schemas.RollbackRequest) -> schemas.RollbackResponse:
        removed = await self.chain.rollback(req.target_hash)
        return schemas.RollbackResponse(removed=[b.hash for b in removed], height=self.chain.height)

    async def commit(self) -> schemas.CommitResponse:
        result = await self.chain.commit()
        return schemas.CommitResponse(
            added=result["added"],
            deleted=result["deleted"],
            height=self.chain.height
        )

    @staticmethod
    def _to_response(index: int, block: Block) -> schemas.BlockResponse:
        return schemas.BlockResponse(
            index=index,
            hash=block.hash,
            previous=block.previous,
            nonce=block.nonce,
            salt=block.salt,
            data=block.payload,
            valid=block.verify(quick=False)
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🔗 [BOOT] Iniciando API de inspección de cadena...")
    chain = await ChainFactory.open_chain()
    ChainContainer.set_instance(chain)
    logger.info(f"✅ Cadena '{chain.name}' cargada ({chain.height} bloques).")
    try:
        yield
    finally:
        logger.info("🛑 Cerrando cadena...")
        await ChainContainer.shutdown()

app = FastAPI(title=settings.title, version=settings.version, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

def get_chain_service(chain: Chain = Depends(get_chain_dependency)) -> ChainService:
    return ChainService(chain)

@app.get("/chain", response_model=schemas.ChainStatusResponse, tags=["Cadena"])
async def get_chain(service: ChainService = Depends(get_chain_service)):
    try:
        return await service.get_status()
    except ChainError as e:
        raise to_http_error(e)

@app.get("/chain/blocks", response_model=List[schemas.BlockResponse], tags=["Bloques"])
async def list_blocks(limit: Optional[int] = None, service: ChainService = Depends(get_chain_service)):
    try:
        return await service.list_blocks(limit)
    except ChainError as e:
        raise to_http_error(e)

@app.get("/chain/blocks/{block_hash}", response_model=schemas.BlockResponse, tags=["Bloques"])
async def get_block(block_hash: str, service: ChainService = Depends(get_chain_service)):
    try:
        return await service.get_block(block_hash)
    except ChainError as e:
        raise to_http_error(e)

@app.post("/chain/blocks", response_model=schemas.BlockResponse, status_code=status.HTTP_201_CREATED, tags=["Bloques"])
async def mine_block(req: schemas.BlockCreateRequest, service: ChainService = Depends(get_chain_service)):
    try:
        return await service.mine_block(req)
    except ChainError as e:
        raise to_http_error(e)

@app.get("/chain/verify", response_model=schemas.VerifyResponse, tags=["Integridad"])
async def verify_chain(quick: bool = True, service: ChainService = Depends(get_chain_service)):
    try:
        return await service.verify(quick)
    except ChainError as e:
        raise to_http_error(e)

@app.post("/chain/rollback", response_model=schemas.RollbackResponse, tags=["Integridad"])
async def rollback_chain(req: schemas.RollbackRequest, service: ChainService = Depends(get_chain_service)):
    try:
        return await service.rollback(req)
    except ChainError as e:
        raise to_http_error(e)

@app.post("/chain/commit", response_model=schemas.CommitResponse, tags=["Persistencia"])
async def commit_chain(service: ChainService = Depends(get_chain_service)):
    try:
        return await service.commit()
    except ChainError as e:
        raise to_http_error(e)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
