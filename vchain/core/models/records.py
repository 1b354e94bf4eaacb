# vchain/core/models/records.py
'''
Esquemas de los registros en reposo (iguales para todos los backends).

    BlockRecord:   { data, hash, nonce, previous, salt }
    ChainMetadata: { name, height }
'''

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class ImmutableRecord(BaseModel):
    """Base inmutable: el registro no cambia después de validarse."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='ignore'
    )


class BlockRecord(ImmutableRecord):
    data: Any = Field(..., description="Payload opaco de la aplicación")
    block_hash: StrictStr = Field(..., alias="hash", min_length=1)
    nonce: StrictInt = Field(..., ge=0)
    previous: StrictStr = Field(..., min_length=1)
    salt: StrictStr

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ChainMetadata(ImmutableRecord):
    name: StrictStr = Field(..., min_length=1)
    height: StrictInt = Field(0, ge=0)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
