# vchain/core/errors.py
'''
Taxonomía de errores del motor de cadena.

Cada error hereda de ChainError y además del builtin equivalente
(TypeError, ValueError, LookupError), así el llamador puede capturar
cualquiera de los dos.
'''

from typing import Any, List, Optional


class ChainError(Exception):
    """Raíz de todos los errores del motor."""


class InvalidArgumentError(ChainError, TypeError):
    """Tipo o forma incorrecta pasada a la API (ej. un no-Block a add)."""


class InvalidPreviousLinkError(ChainError, ValueError):
    """El 'previous' del bloque no coincide con el hash de la punta actual."""


class MalformedBlockError(ChainError, ValueError):
    """Registro de bloque corrupto o con campos faltantes."""


class NoGenesisBlockError(ChainError):
    """Conjunto no vacío sin ningún bloque que enlace al centinela génesis."""


class HashNotFoundError(ChainError, LookupError):
    def __init__(self, block_hash: str):
        super().__init__(f"No existe un bloque con hash '{block_hash}'.")
        self.block_hash = block_hash


class IndexNotFoundError(ChainError, LookupError):
    def __init__(self, index: int):
        super().__init__(f"No existe un bloque en la posición {index}.")
        self.index = index


class ChainNotFoundError(ChainError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"No se encontró la cadena '{name}' en el almacenamiento.")
        self.name = name


class NothingToRollbackError(ChainError):
    """La cadena ya es íntegra y no se indicó un hash destino."""


class MiningExhaustedError(ChainError):
    """Se agotó el rango de nonces sin cumplir la dificultad."""


class MiningInterruptedError(MiningExhaustedError):
    """El minado fue cancelado de forma cooperativa (interrupt_event)."""


class StorageFailureError(ChainError):
    """
    Error de E/S del adaptador de almacenamiento.

    Attributes:
        cause: Excepción original del backend (si existe).
        unapplied: Operaciones pendientes que NO se aplicaron (para reintento).
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        unapplied: Optional[List[Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.unapplied: List[Any] = list(unapplied) if unapplied else []
