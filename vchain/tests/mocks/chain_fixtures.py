# vchain/tests/mocks/chain_fixtures.py
'''
Bloques pre-minados para las pruebas.

    El minado real tarda décimas de segundo por bloque, así que la cadena
    de referencia se mina UNA vez (salts fijos => hashes deterministas) y
    cada prueba recibe copias nuevas reconstruidas desde JSON.

Methods::
    mined_blocks(length) -> List[Block]:
        Los primeros 'length' bloques enlazados desde el génesis.
    make_chain(length, **kwargs) -> Chain:
        Cadena ya ordenada con esos bloques.
'''

from functools import lru_cache
from typing import Any, List, Tuple

from vchain.core.models.block import Block
from vchain.core.models.chain import Chain
from vchain.core.services.block_hasher import SHA256

FIXTURE_LENGTH = 5


def sample_payload(i: int) -> List[dict]:
    return [{"from": f"addr-{i:02d}", "to": f"addr-{i + 1:02d}", "amount": (i + 1) * 10}]


@lru_cache(maxsize=None)
def _mined_records() -> Tuple[str, ...]:
    records = []
    previous = SHA256.genesis_hash
    for i in range(FIXTURE_LENGTH):
        block = Block(payload=sample_payload(i), previous=previous, salt=f"{i:016x}")
        records.append(block.to_json())
        previous = block.hash
    return tuple(records)


def mined_blocks(length: int = FIXTURE_LENGTH) -> List[Block]:
    if length > FIXTURE_LENGTH:
        raise ValueError(f"Solo hay {FIXTURE_LENGTH} bloques pre-minados.")
    return [Block.from_json(raw) for raw in _mined_records()[:length]]


def make_chain(length: int = FIXTURE_LENGTH, **kwargs: Any) -> Chain:
    kwargs.setdefault("ordered", True)
    return Chain(blocks=mined_blocks(length), **kwargs)
