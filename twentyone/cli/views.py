"""Composable view primitives for the Twenty-One CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..state import GameState


@dataclass(slots=True)
class StateSummaryView:
    """Renderable summarising the current table state."""

    state: GameState
    reveal_players: Set[int]
    card_formatter: Callable[[Card], str]

    def _cards_markup(self, cards: Sequence[Card | None], visible: bool) -> str:
        if not visible:
            return f"{sum(1 for card in cards if card is not None)} cards"
        if not cards:
            return "—"
        return " ".join(self.card_formatter(card) if card is not None else "[dim]·[/dim]" for card in cards)

    def _center_panel(self) -> Panel:
        grid = Table(box=box.MINIMAL, expand=True)
        grid.add_column("Pile", justify="left", style="bold")
        grid.add_column("Top", justify="left")
        grid.add_column("Needs", justify="left")
        grid.add_column("Cards", justify="right")
        for idx, pile in enumerate(self.state.center_piles):
            top = self.card_formatter(pile.top_card) if pile.top_card is not None else "—"
            grid.add_row(f"C{idx + 1}", top, pile.expected_label(), str(len(pile.cards)))
        return Panel(grid, title="Center Piles", box=box.SQUARE, border_style="green")

    def _metadata_panel(self) -> Panel:
        turn = self.state.turn
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Turn[/cyan]: {self.state.turn_index + 1}")
        grid.add_row(f"[cyan]Stock[/cyan]: {len(self.state.stock)} card(s)")
        grid.add_row(f"[cyan]Played to center[/cyan]: {turn.cards_played_to_center}")
        if turn.turn_time_remaining is not None:
            grid.add_row(f"[cyan]Time left[/cyan]: {turn.turn_time_remaining:.0f}s")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Role", justify="left")
        table.add_column("Pile", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("Storage", justify="left")

        for idx, player in enumerate(self.state.players):
            role = f"AI ({player.ai_difficulty.value})" if player.is_ai and player.ai_difficulty else "Human"
            visible = idx in self.reveal_players
            top = self.card_formatter(player.pile_top) if player.pile_top is not None else "—"
            pile_display = f"{top} ({len(player.personal_pile)} left)"

            name = player.name
            if self.state.winner_index == idx:
                name = f"[bold green]{name} (Winner)[/bold green]"
            elif idx == self.state.current_player_index and not self.state.is_over:
                name = f"[bold yellow]{name}[/bold yellow]"

            table.add_row(
                name,
                role,
                pile_display,
                self._cards_markup(player.hand, visible),
                self._cards_markup(player.storage, True),
            )

        return Group(table, self._center_panel(), self._metadata_panel())
