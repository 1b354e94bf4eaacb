# vchain/core/interfaces/hasher_protocols.py

from typing import Any, Callable, Protocol


class HashFunctionProtocol(Protocol):
    """
    Define la función de hash enchufable que usan Block y BlockMiner.
    Permite cambiar el algoritmo sin depender de BlockHasher.
    """
    @property
    def algorithm(self) -> str: ...

    @property
    def genesis_hash(self) -> str: ...

    def calculate(self, payload: Any, nonce: int, previous: str, salt: str) -> str: ...

    def bind(self, payload: Any, previous: str, salt: str) -> Callable[[int], str]: ...

