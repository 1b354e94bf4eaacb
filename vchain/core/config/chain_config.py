# vchain/core/config/chain_config.py

import os
from typing import Dict, Any

from vchain.core.config.protocol_constants import ProtocolConstants


class ChainConfig:
    """
    Configuración de la cadena: nombre, algoritmo de hash, autocommit y
    límite del nonce.
    """
    def __init__(self):
        self._name = os.getenv("VCH_CHAIN_NAME", ProtocolConstants.DEFAULT_CHAIN_NAME)
        self._hash_algorithm = os.getenv("VCH_HASH_ALGORITHM", "sha256").lower()
        self._autocommit = os.getenv("VCH_AUTOCOMMIT", "False").lower() == "true"
        self._autocommit_timeout_ms = int(
            os.getenv("VCH_AUTOCOMMIT_MS", ProtocolConstants.DEFAULT_AUTOCOMMIT_TIMER_MS)
        )
        self._max_nonce = int(os.getenv("VCH_MAX_NONCE", ProtocolConstants.MAX_NONCE))

    # --- Getters ---
    @property
    def name(self) -> str: return self._name
    @property
    def hash_algorithm(self) -> str: return self._hash_algorithm
    @property
    def autocommit(self) -> bool: return self._autocommit
    @property
    def autocommit_timeout_ms(self) -> int: return self._autocommit_timeout_ms
    @property
    def max_nonce(self) -> int: return self._max_nonce

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Actualiza la configuración desde un diccionario externo (JSON)."""
        if not data: return

        if "name" in data:
            self._name = str(data["name"])

        if "hash_algorithm" in data:
            self._hash_algorithm = str(data["hash_algorithm"]).lower()

        if "autocommit" in data:
            self._autocommit = bool(data["autocommit"])

        if "autocommit_ms" in data:
            self._autocommit_timeout_ms = int(data["autocommit_ms"])

        if "max_nonce" in data:
            self._max_nonce = int(data["max_nonce"])
