"""
Numeric entry state machine driven by keypad events.

Every transition is a pure function taking an EntryState and returning a
new one. The state carries the overwrite flag, the active product factor
and the in-progress value, so each transition can be tested in isolation.

Standard mode edits a StandardValue; product mode edits one factor of a
ProductValue at a time. Weight and rounding are never applied here: the
user always edits the digits they typed.
"""

import logging
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Union

from .config import get_history_limit
from .constants import (
    DIGIT_KEYS,
    KEY_BACKSPACE,
    KEY_CLEAR,
    KEY_DECIMAL,
    KEY_NEXT,
    KEY_TOGGLE_SIGN,
)
from .models import ProductValue, StandardValue, StoredValue
from .parsing import format_number, parse_number
from .schemas import ScoreColumn

logger = logging.getLogger('scoresheet.keypad')

Target = Union[float, str]


@dataclass(frozen=True)
class EntryState:
    """Keypad state for one focused cell."""
    mode: str = 'standard'
    overwrite: bool = True
    active_factor: int = 0  # 0 = factor A, 1 = factor B (product mode only)
    value: Optional[Union[StandardValue, ProductValue]] = None
    edited: bool = False  # a snapshot for this focus is already in the history

    @classmethod
    def for_column(cls, column: ScoreColumn, stored: StoredValue = None) -> 'EntryState':
        """
        Build the state for a freshly focused cell.

        The first digit typed into a freshly focused cell replaces its value,
        so overwrite starts on. Bare numbers from older sessions are wrapped
        in the tagged value matching the column's mode; in product mode they
        become the factors (value, 1) so the score is unchanged.
        """
        mode = 'product' if column.is_product else 'standard'
        return cls(mode=mode, overwrite=True, active_factor=0, value=_coerce(mode, stored))

    @property
    def target(self) -> Target:
        """The number or string currently being edited."""
        if self.mode == 'product':
            return _factors(self.value)[self.active_factor]
        if isinstance(self.value, StandardValue):
            return self.value.value
        return 0.0

    @property
    def display(self) -> str:
        return format_number(self.target)


class KeyResult(NamedTuple):
    """New state plus whether focus should move to the next cell."""
    state: EntryState
    moved: bool = False


def _coerce(mode: str, stored: StoredValue) -> Optional[Union[StandardValue, ProductValue]]:
    if stored is None:
        return None
    if mode == 'product':
        if isinstance(stored, ProductValue):
            return stored
        history = stored.history if isinstance(stored, StandardValue) else ()
        return ProductValue(factors=(_magnitude(stored), 1.0), history=history)
    if isinstance(stored, StandardValue):
        return stored
    if isinstance(stored, ProductValue):
        return StandardValue(value=stored.value, history=stored.history)
    if isinstance(stored, (int, float, str)) and not isinstance(stored, bool):
        return StandardValue(value=stored if isinstance(stored, str) else float(stored))
    return None


def _magnitude(stored: StoredValue) -> float:
    if isinstance(stored, StandardValue):
        return stored.magnitude
    return parse_number(stored)


def _factors(value: Optional[Union[StandardValue, ProductValue]]) -> tuple[Target, Target]:
    if isinstance(value, ProductValue):
        return value.factors
    return (0.0, 0.0)


def _with_target(state: EntryState, target: Target, overwrite: bool) -> EntryState:
    """
    Write a new target back into the state's value.

    The first edit after focus appends a snapshot to the cell's history;
    later keystrokes in the same focus refine that snapshot in place.
    """
    history = state.value.history if state.value is not None else ()
    if state.edited:
        history = history[:-1]

    if state.mode == 'product':
        factors = list(_factors(state.value))
        factors[state.active_factor] = target
        value = ProductValue(factors=(factors[0], factors[1]))
    else:
        value = StandardValue(value=target)

    snapshot = format_number(value.value)
    value = replace(value, history=(history + (snapshot,))[-get_history_limit():])
    return replace(state, value=value, overwrite=overwrite, edited=True)


def _append_digit(current: Target, digit: int) -> Optional[Target]:
    """Append a digit to the current text. Returns None for the "00" no-op."""
    text = format_number(current)
    if text == '0' and digit == 0:
        return None
    new_text = str(digit) if text == '0' else text + str(digit)
    # Keep fractions as text so "3." and "3.0" survive further typing
    if '.' in new_text:
        return new_text
    return parse_number(new_text)


def press_digit(state: EntryState, digit: int) -> EntryState:
    """
    Handle a digit key.

    In overwrite mode the digit replaces the target. Otherwise it is
    appended to the target's text; a leading "0" is replaced and "0" then 0
    is ignored.
    """
    if not 0 <= digit <= 9:
        raise ValueError(f'Digit must be 0-9, got {digit}')

    if state.overwrite:
        return _with_target(state, float(digit), overwrite=False)

    new_target = _append_digit(state.target, digit)
    if new_target is None:
        return state
    return _with_target(state, new_target, overwrite=False)


def press_decimal(state: EntryState) -> EntryState:
    """Handle the decimal point key. A second press on the same target is a no-op."""
    if state.overwrite:
        return _with_target(state, '0.', overwrite=False)

    text = format_number(state.target)
    if '.' in text:
        return state
    return _with_target(state, text + '.', overwrite=False)


def toggle_sign(state: EntryState) -> EntryState:
    """Negate the target's numeric value. Always leaves overwrite off."""
    number = parse_number(state.target)
    return _with_target(state, -number if number else 0.0, overwrite=False)


def backspace(state: EntryState) -> EntryState:
    """
    Remove the last character of the target.

    Right after focus (overwrite on) this clears the target to 0 instead.
    A single character, an empty remainder or a lone "-" all collapse to 0;
    a remainder ending in "." stays text so the fraction can continue.
    """
    if state.overwrite:
        return _with_target(state, 0.0, overwrite=False)

    text = format_number(state.target)
    if len(text) <= 1:
        return _with_target(state, 0.0, overwrite=False)

    sliced = text[:-1]
    if sliced in ('', '-'):
        new_target: Target = 0.0
    elif sliced.endswith('.'):
        new_target = sliced
    else:
        new_target = parse_number(sliced)
    return _with_target(state, new_target, overwrite=False)


def advance(state: EntryState) -> KeyResult:
    """
    Handle the "next" key.

    Standard mode asks the caller to move focus. Product mode first moves
    from factor A to factor B, and only the advance from factor B moves
    focus, resetting to factor A for the following cell.
    """
    if state.mode == 'product' and state.active_factor == 0:
        return KeyResult(replace(state, active_factor=1, overwrite=True), moved=False)
    return KeyResult(replace(state, active_factor=0, overwrite=True), moved=True)


def select_factor(state: EntryState, index: int) -> EntryState:
    """Focus a product factor directly, ready to be overwritten."""
    if state.mode != 'product':
        return state
    if index not in (0, 1):
        raise ValueError(f'Factor index must be 0 or 1, got {index}')
    return replace(state, active_factor=index, overwrite=True)


def clear(state: EntryState) -> EntryState:
    """Reset the cell to "not yet entered"."""
    return replace(state, value=None, active_factor=0)


def apply_key(state: EntryState, key: str) -> KeyResult:
    """
    Dispatch a keypad key to its transition.

    Args:
        state: Current entry state
        key: One of "0".."9", ".", "+/-", "backspace", "next", "clear"

    Returns:
        KeyResult with the new state and whether focus should move

    Raises:
        ValueError: If the key is not a keypad key
    """
    if key in DIGIT_KEYS:
        result = KeyResult(press_digit(state, int(key)))
    elif key == KEY_DECIMAL:
        result = KeyResult(press_decimal(state))
    elif key == KEY_TOGGLE_SIGN:
        result = KeyResult(toggle_sign(state))
    elif key == KEY_BACKSPACE:
        result = KeyResult(backspace(state))
    elif key == KEY_NEXT:
        result = advance(state)
    elif key == KEY_CLEAR:
        result = KeyResult(clear(state))
    else:
        raise ValueError(f'Unknown keypad key: {key!r}')

    logger.debug(f'key={key!r} display={result.state.display!r} moved={result.moved}')
    return result


def type_keys(state: EntryState, keys: list[str]) -> KeyResult:
    """Feed a sequence of keys, reporting whether any of them moved focus."""
    moved = False
    for key in keys:
        state, key_moved = apply_key(state, key)
        moved = moved or key_moved
    return KeyResult(state, moved)
