import os
import sys
import json
import argparse
import asyncio
import logging

# Importamos uvicorn para el servidor API (Solo se usa en modo api)
import uvicorn

from typing import Any, Dict, Optional

# =========================================================
# ⚡ CONFIGURACIÓN INICIAL DEL SISTEMA
# =========================================================

# 1. Forzar UTF-8 en la consola de Windows (Emojis)
sys.stdout.reconfigure(encoding='utf-8') # type: ignore
sys.stderr.reconfigure(encoding='utf-8') # type: ignore

# 2. Configurar el Path del Proyecto
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.append(ROOT_DIR)

import logger_config

logger = logging.getLogger()

# =========================================================
# 🛠️ FUNCIONES DE UTILIDAD
# =========================================================

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Carga el archivo JSON de configuración (opcional)."""
    if not config_path:
        return {}

    if not os.path.exists(config_path):
        logger.critical(f"❌ No existe el archivo de configuración: {config_path}")
        sys.exit(1)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.critical(f"❌ JSON Corrupto en {config_path}: {e}")
        sys.exit(1)

def inject_environment(args: argparse.Namespace) -> None:
    """Los argumentos de línea de comandos ganan sobre el .env."""
    if args.name:
        os.environ["VCH_CHAIN_NAME"] = args.name
    if args.storage:
        os.environ["VCH_STORAGE_ENGINE"] = args.storage
    if args.data_dir:
        os.environ["VCH_DATA_DIR"] = os.path.abspath(args.data_dir)
    if args.port:
        os.environ["VCH_API_PORT"] = str(args.port)

def run_demo() -> None:
    from vchain.core.factories.chain_factory import ChainFactory
    from vchain.interface.cli.demo import ChainDemo

    async def _run() -> None:
        chain = await ChainFactory.open_chain()
        await ChainDemo(chain).run()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print("\n👋 Demo interrumpida.")
    except Exception as e:
        logger.critical(f"❌ Error fatal en la demo: {e}", exc_info=True)
        sys.exit(1)

def run_api() -> None:
    from vchain.interface.api.config import settings

    print("\n" + "="*60)
    print(f"🔗 INICIANDO API DE INSPECCIÓN: {os.getenv('VCH_CHAIN_NAME', 'chain')}")
    print(f"🌐 API Disponible en: http://{settings.host}:{settings.port}")
    print("="*60 + "\n")

    uvicorn.run(
        "vchain.interface.api.server:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )

# =========================================================
# 🚀 ENTRY POINT PRINCIPAL
# =========================================================

def main():
    parser = argparse.ArgumentParser(description="Lanzador vchain")

    parser.add_argument("--mode", choices=["demo", "api"], default="demo", help="Demo en consola o API HTTP")
    parser.add_argument("--config", help="Archivo JSON con secciones 'chain' y 'storage'")
    parser.add_argument("--name", help="Nombre de la cadena")
    parser.add_argument("--storage", choices=["memory", "file", "sqlite"], help="Motor de almacenamiento")
    parser.add_argument("--data-dir", help="Directorio de datos")
    parser.add_argument("--port", type=int, help="Forzar puerto API")

    args = parser.parse_args()

    inject_environment(args)
    logger_config.setup_logging()

    # Después de inyectar el entorno, para que Paths y las configs lo lean
    from vchain.core.config.config_manager import ConfigManager
    from vchain.core.config.paths import Paths

    Paths.refresh()
    Paths.ensure_directories_exist()
    ConfigManager.reset()
    ConfigManager().load_from_json_dict(load_config(args.config))

    if args.mode == "api":
        run_api()
    else:
        run_demo()

if __name__ == "__main__":
    main()
