"""Data models for stored cell values, players and sessions."""

from dataclasses import dataclass, field
from typing import Any, Union

from .constants import SESSION_ACTIVE
from .parsing import format_number, parse_number


@dataclass(frozen=True)
class StandardValue:
    """Standard-mode number cell: a number or an in-progress numeric string."""
    value: Union[float, str] = 0.0
    history: tuple[str, ...] = ()  # Cosmetic snapshots, e.g. ("10", "+5")

    @property
    def magnitude(self) -> float:
        return parse_number(self.value)


@dataclass(frozen=True)
class ProductValue:
    """Product-mode number cell: two factors whose product is the preview value."""
    factors: tuple[Union[float, str], Union[float, str]] = (0.0, 0.0)
    history: tuple[str, ...] = ()

    @property
    def value(self) -> float:
        """Unweighted, unrounded product of the two factors."""
        return parse_number(self.factors[0]) * parse_number(self.factors[1])

    @property
    def magnitude(self) -> float:
        return self.value


# What a cell can hold: tagged number values, an option value, a bool or text
StoredValue = Union[StandardValue, ProductValue, float, int, bool, str, None]


@dataclass
class Player:
    """A participant in a session with per-column stored values."""
    id: str
    name: str
    color: str
    scores: dict[str, StoredValue] = field(default_factory=dict)
    total_score: float = 0.0  # Cached projection, rebuilt by the session


@dataclass
class GameSession:
    """One played instance of a template."""
    id: str
    template_id: str
    start_time: float
    players: list[Player] = field(default_factory=list)
    status: str = SESSION_ACTIVE

    def get_player(self, player_id: str) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise KeyError(f'Unknown player: {player_id}')


def value_to_dict(stored: StoredValue) -> Any:
    """Convert a stored value to its JSON shape."""
    if isinstance(stored, ProductValue):
        return {
            'value': stored.value,
            'factors': [stored.factors[0], stored.factors[1]],
            'history': list(stored.history),
        }
    if isinstance(stored, StandardValue):
        return {'value': stored.value, 'history': list(stored.history)}
    return stored


def value_from_dict(data: Any) -> StoredValue:
    """
    Rebuild a stored value from its JSON shape.

    Records with a two-item `factors` list become ProductValue, records with
    a `value` key become StandardValue, and anything else (option values,
    booleans, text, bare legacy numbers) is returned unchanged.
    """
    if isinstance(data, dict):
        history = tuple(str(h) for h in data.get('history') or ())
        factors = data.get('factors')
        if isinstance(factors, (list, tuple)) and len(factors) == 2:
            return ProductValue(factors=(factors[0], factors[1]), history=history)
        if 'value' in data:
            return StandardValue(value=data['value'], history=history)
        return None
    return data


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        'id': player.id,
        'name': player.name,
        'color': player.color,
        'scores': {col_id: value_to_dict(v) for col_id, v in player.scores.items()},
        'total_score': player.total_score,
    }


def player_from_dict(data: dict[str, Any]) -> Player:
    return Player(
        id=data['id'],
        name=data.get('name', ''),
        color=data.get('color', ''),
        scores={col_id: value_from_dict(v) for col_id, v in (data.get('scores') or {}).items()},
        total_score=float(data.get('total_score', 0.0) or 0.0),
    )


def describe_value(stored: StoredValue) -> str:
    """Short human-readable rendering of a stored value for CLI output."""
    if stored is None:
        return '-'
    if isinstance(stored, ProductValue):
        a, b = stored.factors
        return f'{format_number(a)} x {format_number(b)}'
    if isinstance(stored, StandardValue):
        return format_number(stored.value)
    if isinstance(stored, bool):
        return 'yes' if stored else 'no'
    return format_number(stored)
