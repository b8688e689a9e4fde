"""Live scoring session: players, stored values and always-fresh totals."""

import logging
import time
import uuid
from dataclasses import replace
from typing import Any, Optional

from .config import (
    get_default_direction,
    get_default_player_count,
    get_default_player_name,
    get_history_limit,
    get_player_bounds,
    get_player_colors,
)
from .constants import (
    DIRECTION_HORIZONTAL,
    DIRECTION_VERTICAL,
    SESSION_ACTIVE,
    SESSION_COMPLETED,
)
from .keypad import EntryState, apply_key, select_factor
from .models import GameSession, Player, StandardValue, StoredValue
from .parsing import format_number
from .ranking import get_winners, rank_players
from .schemas import GameTemplate, ScoreColumn
from .scoring import calculate_player_total, get_raw_value, score_breakdown
from .storage import session_from_dict, session_to_dict

logger = logging.getLogger('scoresheet.session')

Cell = tuple[str, str]  # (player_id, column_id)


class ScoreSession:
    """
    A session played with one template.

    Owns the players and their stored values, routes keypad keys to the
    entry state machine for the focused cell, and recomputes every total
    from scratch after each mutation. Persistence is left to the caller.
    """

    def __init__(
        self,
        template: GameTemplate,
        session: GameSession,
        direction: Optional[str] = None,
    ):
        """
        Wrap an existing session.

        Args:
            template: Template defining the columns
            session: Session state (players and stored values)
            direction: Focus movement after an advance, 'vertical' (next
                column for the same player) or 'horizontal' (next player)
        """
        direction = direction or get_default_direction()
        if direction not in (DIRECTION_VERTICAL, DIRECTION_HORIZONTAL):
            raise ValueError(f'Unknown direction: {direction}')

        self.template = template
        self.session = session
        self.direction = direction
        self.cursor: Optional[Cell] = None
        self.entry: Optional[EntryState] = None
        self.recompute_totals()

    @classmethod
    def start(
        cls,
        template: GameTemplate,
        player_names: Optional[list[str]] = None,
        player_count: Optional[int] = None,
        direction: Optional[str] = None,
    ) -> 'ScoreSession':
        """
        Start a new session.

        Args:
            template: Template to play
            player_names: Explicit player names (overrides player_count)
            player_count: Number of default-named players; clamped to the
                configured bounds (default from config)
            direction: Focus movement after an advance

        Returns:
            New ScoreSession with empty values
        """
        min_players, max_players = get_player_bounds()
        if player_names:
            names = list(player_names)[:max_players]
        else:
            count = player_count if player_count is not None else get_default_player_count()
            count = max(min_players, min(max_players, count))
            names = [get_default_player_name(i + 1) for i in range(count)]

        colors = get_player_colors()
        players = [
            Player(id=uuid.uuid4().hex, name=name, color=colors[i % len(colors)])
            for i, name in enumerate(names)
        ]
        session = GameSession(
            id=uuid.uuid4().hex,
            template_id=template.id,
            start_time=time.time(),
            players=players,
        )
        logger.info(f'Started session {session.id} for {template.name!r} with {len(players)} players')
        return cls(template, session, direction=direction)

    @property
    def players(self) -> list[Player]:
        return self.session.players

    def _column(self, column_id: str) -> ScoreColumn:
        column = self.template.get_column(column_id)
        if column is None:
            raise KeyError(f'Unknown column: {column_id}')
        return column

    def get_value(self, player_id: str, column_id: str) -> StoredValue:
        return self.session.get_player(player_id).scores.get(column_id)

    def _store(self, player_id: str, column_id: str, stored: StoredValue) -> None:
        player = self.session.get_player(player_id)
        if stored is None:
            player.scores.pop(column_id, None)
        else:
            player.scores[column_id] = stored
        self.recompute_totals()

    def recompute_totals(self) -> None:
        """Rebuild every cached total from the stored values."""
        for player in self.session.players:
            player.total_score = calculate_player_total(player, self.template)

    # Keypad entry

    def focus(self, player_id: str, column_id: str) -> EntryState:
        """
        Focus a number cell for keypad entry.

        The next digit replaces the cell's value (overwrite mode).

        Raises:
            KeyError: If the player or column is unknown
            ValueError: If the column does not take keypad input
        """
        column = self._column(column_id)
        if not column.accepts_keypad:
            raise ValueError(f'{column.name or column.id} is a {column.data_kind} column, not keypad input')
        stored = self.get_value(player_id, column_id)
        self.cursor = (player_id, column_id)
        self.entry = EntryState.for_column(column, stored)
        return self.entry

    def blur(self) -> None:
        """Close the keypad."""
        self.cursor = None
        self.entry = None

    def press(self, player_id: str, column_id: str, key: str) -> bool:
        """
        Apply a keypad key to a cell, focusing it first if needed.

        Args:
            player_id: Player being edited
            column_id: Number column being edited
            key: Keypad key ("0".."9", ".", "+/-", "backspace", "next", "clear")

        Returns:
            True if focus moved on to the next cell
        """
        if self.cursor != (player_id, column_id) or self.entry is None:
            self.focus(player_id, column_id)

        state, moved = apply_key(self.entry, key)
        # Keys that only move focus leave the stored value as it was
        if state.value != self.entry.value:
            self._store(player_id, column_id, state.value)
        self.entry = state

        if moved:
            self._move_to_next(player_id, column_id)
        return moved

    def type_keys(self, player_id: str, column_id: str, keys: list[str]) -> Optional[Cell]:
        """
        Type keys starting at a cell, following focus as "next" moves it.

        Returns:
            The focused cell afterwards (None if focus ran off the sheet)
        """
        cell: Optional[Cell] = (player_id, column_id)
        for key in keys:
            if cell is None:
                break
            self.press(cell[0], cell[1], key)
            cell = self.cursor
        return cell

    def select_factor(self, player_id: str, column_id: str, index: int) -> EntryState:
        """Tap one of the two product factors of a cell."""
        if self.cursor != (player_id, column_id) or self.entry is None:
            self.focus(player_id, column_id)
        self.entry = select_factor(self.entry, index)
        return self.entry

    def _keypad_cells(self) -> list[Cell]:
        number_columns = [c.id for c in self.template.columns if c.accepts_keypad]
        player_ids = [p.id for p in self.session.players]
        if self.direction == DIRECTION_VERTICAL:
            return [(p, c) for p in player_ids for c in number_columns]
        return [(p, c) for c in number_columns for p in player_ids]

    def next_cell(self, player_id: str, column_id: str) -> Optional[Cell]:
        """The number cell after this one in the session's direction, if any."""
        cells = self._keypad_cells()
        try:
            index = cells.index((player_id, column_id))
        except ValueError:
            return None
        return cells[index + 1] if index + 1 < len(cells) else None

    def _move_to_next(self, player_id: str, column_id: str) -> None:
        target = self.next_cell(player_id, column_id)
        if target is None:
            logger.debug('Reached the last cell, closing keypad')
            self.blur()
            return
        self.focus(*target)

    # Direct values

    def set_value(self, player_id: str, column_id: str, raw: StoredValue) -> None:
        """
        Store a value directly (option value, boolean, text, or a number).

        None clears the cell.
        """
        column = self._column(column_id)
        if column.data_kind == 'number' and isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
            raw = StandardValue(value=raw if isinstance(raw, str) else float(raw), history=(format_number(raw),))
        self._store(player_id, column_id, raw)
        if self.cursor == (player_id, column_id):
            self.entry = EntryState.for_column(column, raw)
        logger.debug(f'Set {column.id} for player {player_id} to {raw!r}')

    def clear_value(self, player_id: str, column_id: str) -> None:
        """Remove a cell's value so it reads as not yet entered."""
        self._column(column_id)
        self._store(player_id, column_id, None)
        if self.cursor == (player_id, column_id) and self.entry is not None:
            self.entry = replace(self.entry, value=None, active_factor=0)

    def quick_buttons(self, column_id: str) -> list[float]:
        """
        Deltas offered as quick add buttons for a column.

        Each configured button value is offered both as an add and a subtract,
        so [5] yields [5, -5]. Columns without buttons offer none.
        """
        column = self._column(column_id)
        buttons = []
        for value in column.quick_buttons:
            for delta in (value, -value):
                if delta not in buttons:
                    buttons.append(delta)
        return buttons

    def quick_add(self, player_id: str, column_id: str, delta: float) -> StandardValue:
        """
        Add a delta to a standard number cell, recording it in the history.

        Columns with quick buttons only accept their offered deltas; columns
        without any accept an arbitrary delta.

        Raises:
            ValueError: If the column is not a standard number column, or the
                delta is not one of its quick buttons
        """
        column = self._column(column_id)
        if column.data_kind != 'number' or column.is_product:
            raise ValueError(f'Quick add needs a standard number column, got {column.name or column.id}')
        offered = self.quick_buttons(column_id)
        if offered and delta not in offered:
            raise ValueError(
                f'{column.name or column.id} has no quick button for {format_number(delta)} '
                f'(offers {", ".join(format_number(d) for d in offered)})'
            )

        stored = self.get_value(player_id, column_id)
        history = stored.history if isinstance(stored, StandardValue) else ()

        snapshot = f'+{format_number(delta)}' if delta >= 0 else format_number(delta)
        updated = StandardValue(
            value=get_raw_value(stored) + delta,
            history=(history + (snapshot,))[-get_history_limit():],
        )

        self._store(player_id, column_id, updated)
        if self.cursor == (player_id, column_id):
            self.entry = EntryState.for_column(column, updated)
        return updated

    # Lifecycle

    def update_template(self, template: GameTemplate) -> None:
        """
        Switch to an edited template and recompute every total.

        Values for columns that no longer exist are dropped.
        """
        if template.id != self.template.id:
            logger.warning(f'Session {self.session.id} switched from template {self.template.id} to {template.id}')
            self.session.template_id = template.id

        kept = {column.id for column in template.columns}
        for player in self.session.players:
            for column_id in [c for c in player.scores if c not in kept]:
                del player.scores[column_id]

        self.template = template
        if self.cursor is not None:
            column = template.get_column(self.cursor[1])
            if column is None or not column.accepts_keypad:
                self.blur()
            else:
                self.focus(*self.cursor)
        self.recompute_totals()
        logger.info(f'Template updated for session {self.session.id}')

    def reset(self) -> None:
        """Start over: new session id, same players, empty values."""
        for player in self.session.players:
            player.scores = {}
            player.total_score = 0.0
        old_id = self.session.id
        self.session.id = uuid.uuid4().hex
        self.session.start_time = time.time()
        self.session.status = SESSION_ACTIVE
        self.blur()
        logger.info(f'Reset session {old_id} as {self.session.id}')

    def finish(self) -> None:
        self.session.status = SESSION_COMPLETED
        self.blur()
        logger.info(f'Session {self.session.id} completed')

    def rename_player(self, player_id: str, name: str) -> None:
        self.session.get_player(player_id).name = name.strip()

    # Results

    def breakdown(self, player_id: str) -> dict[str, float]:
        _, per_column = score_breakdown(self.session.get_player(player_id), self.template)
        return per_column

    def rankings(self) -> list[tuple[int, Player]]:
        return rank_players(self.session.players)

    def winners(self) -> list[str]:
        return get_winners(self.session.players)

    def to_dict(self) -> dict[str, Any]:
        return session_to_dict(self.session)

    @classmethod
    def from_dict(
        cls,
        template: GameTemplate,
        data: dict[str, Any],
        direction: Optional[str] = None,
    ) -> 'ScoreSession':
        """Restore a saved session; cached totals are recomputed, not trusted."""
        return cls(template, session_from_dict(data), direction=direction)
