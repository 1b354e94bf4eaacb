# vchain/interface/cli/demo.py
'''
Demostración interactiva del motor: carga, clona, agrega bloques, muestra
el diff, confirma, hace rollback al génesis y dibuja el hash como píxeles.
'''

import logging
import random
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.style import Style
from rich.text import Text

from vchain.core.builders.block_builder import BlockBuilder
from vchain.core.errors import ChainError, StorageFailureError
from vchain.core.models.block import Block
from vchain.core.models.chain import Chain
from vchain.core.utils.hash_image import HashImage

logger = logging.getLogger(__name__)

OK_MARK = "[green]✓[/green]"
FAIL_MARK = "[red]✗[/red]"
WARN_STYLE = "bold rgb(255,136,0)"


class ChainDemo:

    def __init__(
        self,
        chain: Chain,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        max_new_blocks: int = 10
    ) -> None:
        self._chain = chain
        self._console = console or Console()
        self._rng = rng or random.Random()
        self._max_new_blocks = max_new_blocks

    @property
    def chain(self) -> Chain: return self._chain

    # --- Datos de ejemplo ---

    def create_transactions(self) -> List[List[Dict[str, Any]]]:
        """Entre 1 y 20 transferencias {from, to, amount} con direcciones aleatorias."""
        count = self._rng.randint(1, 20)
        return [[{
            "from": f"{self._rng.getrandbits(256):064x}",
            "to": f"{self._rng.getrandbits(256):064x}",
            "amount": self._rng.getrandbits(16)
        }] for _ in range(count)]

    async def add_blocks(self) -> List[Block]:
        """Agrega entre 1 y max_new_blocks bloques minados sobre la punta."""
        added: List[Block] = []
        for _ in range(self._rng.randint(1, self._max_new_blocks)):
            block = await BlockBuilder.build_next(self._chain, self.create_transactions())
            try:
                added.append(await self._chain.add(block))
            except ChainError as e:
                self._console.print(f"[{WARN_STYLE}]{e}[/]")
        return added

    # --- Salida ---

    async def print_chain(self, chain: Optional[Chain] = None) -> None:
        chain = chain or self._chain
        is_valid = await chain.verify(quick=False)

        self._console.print()
        self._console.print(
            f"{OK_MARK if is_valid else FAIL_MARK} "
            f"[bold underline]{chain.name} ({chain.height} blocks)[/]"
        )
        for block in chain.blocks:
            self._console.print(f"↳ {block.hash} {OK_MARK if block.verify(quick=False) else FAIL_MARK}")
        self._console.print()

    async def print_diff(self, original: Chain, changed: Chain) -> List[Optional[Block]]:
        diff = await original.diff(changed)
        i = 0

        while i < len(diff) and diff[i] is None:
            i += 1
        self._print_banner(f"{i} preceding blocks are the same.", "on green")

        while i < len(diff):
            block = diff[i]
            if block is None:
                break
            self._console.print(Text("\t", style="on red"), end=" ")
            self._console.print_json(block.to_json())
            i += 1

        if i < len(diff):
            self._print_banner(f"{len(diff) - i} following blocks are the same.", "on green")

        return diff

    def _print_banner(self, message: str, style: str) -> None:
        self._console.print()
        self._console.print(Text("\t", style=style), message)
        self._console.print()

    def print_hash_graphic(self, block_hash: str) -> None:
        self._console.print()
        for row in HashImage.to_pixels(block_hash):
            line = Text()
            for r, g, b in row:
                line.append("  ", style=Style(bgcolor=f"rgb({r},{g},{b})", bold=True))
            self._console.print(line)

    # --- Flujo completo ---

    async def _commit(self) -> None:
        try:
            await self._chain.commit()
        except StorageFailureError as e:
            self._console.print(f"[{WARN_STYLE}]There was an error committing the changes to the chain![/]")
            self._console.print(f"[red]{e}[/red]")
            logger.error(f"Commit fallido en la demo: {e}")

    async def run(self) -> None:
        await self.print_chain()

        # Copia intacta de la cadena original
        original = await self._chain.clone()
        clone_is_equal = await self._chain.equals(original)
        self._console.print(
            f"Clone of chain {'is' if clone_is_equal else 'IS NOT'} equal to the original chain.\n"
        )

        await self.add_blocks()

        await self.print_diff(original, self._chain)
        await self.print_chain()

        await self._commit()

        genesis = await self._chain.get(index=0)
        await self._chain.rollback(genesis.hash)

        self.print_hash_graphic(genesis.hash)
        await self.print_chain()

        await self._commit()

        if self._chain.is_closable:
            self._console.print("Closing Chain...")
            await self._chain.close()
