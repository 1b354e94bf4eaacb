# vchain/tests/unit/test_hash_image.py
'''
Test Suite para HashImage:
    Grilla cuadrada de píxeles RGB derivada de un hash hexadecimal.
'''

import sys
import os
import unittest

# --- AJUSTE DE RUTA ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, '../../..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from vchain.core.utils.hash_image import HashImage

BLACK = (0, 0, 0)


class TestHashImage(unittest.TestCase):

    def test_sha256_hash_is_a_4x4_grid(self):
        print("\n>> Ejecutando: test_sha256_hash_is_a_4x4_grid...")
        block_hash = "ff0000" + "00ff00" + "0000ff" + "123456" + "1" * 40
        pixels = HashImage.to_pixels(block_hash)

        self.assertEqual(len(pixels), 4)
        self.assertTrue(all(len(row) == 4 for row in pixels))
        self.assertEqual(pixels[0], [(255, 0, 0), (0, 255, 0), (0, 0, 255), (0x12, 0x34, 0x56)])
        print("[SUCCESS] 64 dígitos hex -> 4x4 píxeles.")

    def test_last_row_padded_with_zeros(self):
        print("\n>> Ejecutando: test_last_row_padded_with_zeros...")
        pixels = HashImage.to_pixels("abcdef" * 10 + "1234")

        self.assertEqual(pixels[2], [(0xab, 0xcd, 0xef), (0xab, 0xcd, 0xef), (0x12, 0x34, 0x00), BLACK])
        self.assertEqual(pixels[3], [BLACK] * 4)
        print("[SUCCESS] Relleno con ceros y fila negra final.")

    def test_short_hash_gets_missing_rows(self):
        print("\n>> Ejecutando: test_short_hash_gets_missing_rows...")
        pixels = HashImage.to_pixels("f" * 25)

        self.assertEqual(len(pixels), 3)
        self.assertEqual(pixels[1], [(255, 255, 255), (0xf0, 0, 0), BLACK])
        self.assertEqual(pixels[2], [BLACK] * 3)
        self.assertEqual(HashImage.to_pixels(""), [])
        print("[SUCCESS] Grilla siempre cuadrada.")


if __name__ == '__main__':
    unittest.main()
