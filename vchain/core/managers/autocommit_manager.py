# vchain/core/managers/autocommit_manager.py

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from vchain.core.config.protocol_constants import ProtocolConstants

logger = logging.getLogger(__name__)


class AutocommitManager:
    """
    Política de debounce sobre add(): cada llamada a schedule() reinicia el
    temporizador y solo el último dispara el commit.

    El temporizador y el commit son tareas separadas: reiniciar el
    temporizador nunca cancela un commit que ya está en curso. La
    serialización entre commits la garantiza el lock de la propia cadena.
    """

    def __init__(
        self,
        commit: Callable[[], Awaitable[Any]],
        timeout_ms: int = ProtocolConstants.DEFAULT_AUTOCOMMIT_TIMER_MS
    ) -> None:
        self._commit = commit
        self._timeout_ms = timeout_ms
        self._timer: Optional['asyncio.Task[None]'] = None
        self._in_flight: Optional['asyncio.Task[None]'] = None
        self._last_error: Optional[BaseException] = None

    # --- Getters ---
    @property
    def last_error(self) -> Optional[BaseException]: return self._last_error

    def schedule(self) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._countdown())

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def wait_idle(self) -> None:
        """Espera a que termine el commit en curso (si hay uno)."""
        if self._in_flight is not None and not self._in_flight.done():
            await asyncio.shield(self._in_flight)

    async def _countdown(self) -> None:
        await asyncio.sleep(self._timeout_ms / 1000)
        self._timer = None

        # Un commit en vuelo absorbe al nuevo: se encadena detrás de él
        previous = self._in_flight
        self._in_flight = asyncio.get_running_loop().create_task(self._run_commit(previous))

    async def _run_commit(self, previous: Optional['asyncio.Task[None]']) -> None:
        if previous is not None and not previous.done():
            await previous
        try:
            await self._commit()
            self._last_error = None
            logger.info("💾 Autocommit completado.")
        except Exception as e:
            # Las operaciones siguen en la bitácora para el próximo commit
            self._last_error = e
            logger.exception("❌ Autocommit fallido")
