# vchain/core/utils/hash_image.py

import math
from typing import List, Tuple

RGB = Tuple[int, int, int]


class HashImage:

    @staticmethod
    def to_pixels(block_hash: str) -> List[List[RGB]]:
        """
        Convierte un hash hex en una grilla cuadrada de colores RGB.

        Cada 6 dígitos hex son un píxel; cada fila tiene 'size' píxeles con
        size = ceil(sqrt(len/6)). La última fila se completa con ceros y
        las filas faltantes se rellenan en negro.
        """
        if not block_hash:
            return []

        size = math.ceil(math.sqrt(len(block_hash) / 6))
        row_chars = size * 6

        rows = [block_hash[i:i + row_chars] for i in range(0, len(block_hash), row_chars)]
        rows[-1] = rows[-1].ljust(row_chars, "0")
        while len(rows) < size:
            rows.append("0" * row_chars)

        return [
            [HashImage._pixel(row[c:c + 6]) for c in range(0, row_chars, 6)]
            for row in rows
        ]

    @staticmethod
    def _pixel(chunk: str) -> RGB:
        return (int(chunk[0:2], 16), int(chunk[2:4], 16), int(chunk[4:6], 16))
