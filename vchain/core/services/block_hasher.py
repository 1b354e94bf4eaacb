# vchain/core/services/block_hasher.py

import json
import hashlib
import logging
from typing import Any, Callable, Dict, Tuple

from vchain.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_SEPARATORS = (',', ':')


class BlockHasher:
    """
    Digest hexadecimal sobre la codificación canónica de un bloque.

    La codificación es el JSON de {data, nonce, previous, salt} con claves
    ordenadas y separadores compactos. Como las claves ordenadas dejan el
    nonce en medio, la codificación se parte en prefijo/sufijo una sola vez
    y el minado solo concatena el nonce.
    """

    def __init__(self, algorithm: str):
        name = algorithm.lower()
        if name not in hashlib.algorithms_available:
            raise InvalidArgumentError(f"Algoritmo de hash '{algorithm}' no soportado.")

        probe = hashlib.new(name)
        if probe.digest_size == 0:
            raise InvalidArgumentError(f"Algoritmo '{algorithm}' sin digest de longitud fija.")

        self._algorithm = name
        self._digest_length = probe.digest_size * 2

    # --- Getters ---
    @property
    def algorithm(self) -> str: return self._algorithm
    @property
    def digest_length(self) -> int: return self._digest_length
    @property
    def genesis_hash(self) -> str: return "0" * self._digest_length

    def split_encoding(self, payload: Any, previous: str, salt: str) -> Tuple[str, str]:
        """Devuelve (prefijo, sufijo) de la codificación canónica, sin el nonce."""
        try:
            data_json = json.dumps(payload, sort_keys=True, separators=_SEPARATORS)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"El payload no es serializable a JSON: {e}") from e

        prefix = '{"data":' + data_json + ',"nonce":'
        suffix = (
            ',"previous":' + json.dumps(previous) +
            ',"salt":' + json.dumps(salt) + '}'
        )
        return prefix, suffix

    def bind(self, payload: Any, previous: str, salt: str) -> Callable[[int], str]:
        """Fija payload/previous/salt y retorna una función nonce -> hash."""
        prefix, suffix = self.split_encoding(payload, previous, salt)
        algorithm = self._algorithm

        def digest(nonce: int) -> str:
            encoded = f"{prefix}{int(nonce)}{suffix}".encode('utf-8')
            return hashlib.new(algorithm, encoded).hexdigest()

        return digest

    def calculate(self, payload: Any, nonce: int, previous: str, salt: str) -> str:
        return self.bind(payload, previous, salt)(nonce)

    def __repr__(self) -> str:
        return f"BlockHasher({self._algorithm!r})"


SHA1 = BlockHasher("sha1")
SHA224 = BlockHasher("sha224")
SHA256 = BlockHasher("sha256")
SHA384 = BlockHasher("sha384")
SHA512 = BlockHasher("sha512")

_REGISTRY: Dict[str, BlockHasher] = {
    h.algorithm: h for h in (SHA1, SHA224, SHA256, SHA384, SHA512)
}


def get_hasher(name: str) -> BlockHasher:
    """Resuelve un nombre de configuración ('SHA256', 'sha-256', ...) a su hasher."""
    key = name.lower().replace("-", "").replace("_", "")
    hasher = _REGISTRY.get(key)
    if hasher is None:
        logger.error(f"❌ Algoritmo de hash desconocido: {name}")
        raise InvalidArgumentError(f"Algoritmo de hash '{name}' no soportado.")
    return hasher
