# vchain/core/config/protocol_constants.py

from enum import IntEnum
from typing import Final


class ChainOperation(IntEnum):
    """Operaciones registradas en la bitácora entre commits."""
    ADD = 0
    DELETE = 1


class ProtocolConstants:
    """
    Vocabulario inmutable del motor de cadena.
    Centraliza:
    1. Regla de prueba de trabajo (sufijo fijo).
    2. Centinela del bloque génesis.
    3. Valores por defecto del autocommit y del minado.
    """

    # ==========================================================================
    # 1. PRUEBA DE TRABAJO
    # ==========================================================================
    # Dificultad fija: todo hash válido termina en estos 4 dígitos hex.
    DIFFICULTY_SUFFIX: Final[str] = "0000"

    # Límite del espacio de búsqueda del nonce (entero unsigned de 4 bytes)
    MAX_NONCE: Final[int] = 0xFFFFFFFF

    # ==========================================================================
    # 2. GÉNESIS
    # ==========================================================================
    # El primer bloque apunta a este hash (longitud hex de SHA-256)
    GENESIS_HASH: Final[str] = "0" * 64

    # ==========================================================================
    # 3. BLOQUES Y PERSISTENCIA
    # ==========================================================================
    SALT_BYTES: Final[int] = 8
    DEFAULT_AUTOCOMMIT_TIMER_MS: Final[int] = 5000
    DEFAULT_CHAIN_NAME: Final[str] = "chain"
    CLONE_SUFFIX: Final[str] = "-CLONE"
    METADATA_FILENAME: Final[str] = "chain.json"
