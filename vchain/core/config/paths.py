# vchain/core/config/paths.py

import os
from pathlib import Path


class Paths:
    """
    Centraliza las rutas absolutas del proyecto.
    Soporta Inyección de Dependencias vía Variables de Entorno.
    """

    # 1. Raíz del código (fallback)
    _CODE_ROOT = Path(__file__).resolve().parent.parent.parent.parent

    # 2. Si existe la variable de entorno, la usa. Si no, _CODE_ROOT/data.
    DATA_DIR = Path(os.getenv("VCH_DATA_DIR", _CODE_ROOT / "data"))

    # 3. Subcarpetas
    CHAINS_DIR = DATA_DIR / "chains"
    DB_DIR = DATA_DIR / "db"
    LOGS_DIR = DATA_DIR / "logs"

    @staticmethod
    def refresh() -> None:
        """Recalcula las rutas si VCH_DATA_DIR cambió después de importar."""
        Paths.DATA_DIR = Path(os.getenv("VCH_DATA_DIR", Paths._CODE_ROOT / "data"))
        Paths.CHAINS_DIR = Paths.DATA_DIR / "chains"
        Paths.DB_DIR = Paths.DATA_DIR / "db"
        Paths.LOGS_DIR = Paths.DATA_DIR / "logs"

    @staticmethod
    def ensure_directories_exist():
        """Crea toda la estructura de carpetas si no existe."""
        os.makedirs(Paths.CHAINS_DIR, exist_ok=True)
        os.makedirs(Paths.DB_DIR, exist_ok=True)
        os.makedirs(Paths.LOGS_DIR, exist_ok=True)

        return {
            "root": str(Paths.DATA_DIR),
            "logs": str(Paths.LOGS_DIR)
        }
