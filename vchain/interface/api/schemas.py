# vchain/interface/api/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, List, Optional


class ImmutableModel(BaseModel):
    """
    Clase base que fuerza la inmutabilidad (frozen=True).
    Garantiza que el estado del objeto no sea modificado después de crearse.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='ignore'
    )

# --- BLOQUES ---

class BlockCreateRequest(ImmutableModel):
    data: Any = Field(default_factory=list, description="Payload opaco a minar sobre la punta")

class BlockResponse(ImmutableModel):
    index: int
    hash: str
    previous: str
    nonce: int
    salt: str
    data: Any
    valid: bool

# --- CADENA ---

class ChainStatusResponse(ImmutableModel):
    name: str
    height: int
    head: Optional[str]
    is_valid: bool
    pending_operations: int

class VerifyResponse(ImmutableModel):
    quick: bool
    is_valid: bool

class RollbackRequest(ImmutableModel):
    target_hash: Optional[str] = Field(None, description="Hash que queda como nueva punta. Vacío = primer bloque inválido")

class RollbackResponse(ImmutableModel):
    removed: List[str]
    height: int

class CommitResponse(ImmutableModel):
    added: List[str]
    deleted: List[str]
    height: int
