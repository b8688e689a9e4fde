"""Scoring functions turning stored cell values into contributions."""

import math
from typing import Tuple

from .constants import OPTION_KINDS
from .models import Player, ProductValue, StandardValue, StoredValue
from .parsing import parse_number
from .schemas import GameTemplate, ScoreColumn


def get_raw_value(stored: StoredValue) -> float:
    """
    Extract the numeric magnitude of a stored value.

    Tagged values use their magnitude (a product value uses its unweighted
    product), booleans count as 1/0, strings are parsed leniently and
    absent values are 0.
    """
    if isinstance(stored, (StandardValue, ProductValue)):
        return stored.magnitude
    return parse_number(stored)


def apply_rounding(value: float, mode: str) -> float:
    """
    Apply a column rounding mode to a final weighted or product value.

    Rounding:
        - floor: toward negative infinity
        - ceil: toward positive infinity
        - round: nearest integer, halves round up (2.5 -> 3, -2.5 -> -2)
        - none (or anything else): unchanged
    """
    if mode == 'floor':
        return float(math.floor(value))
    if mode == 'ceil':
        return float(math.ceil(value))
    if mode == 'round':
        floor = math.floor(value)
        return float(floor + 1 if value - floor >= 0.5 else floor)
    return value


def score_option(column: ScoreColumn, stored: StoredValue) -> float:
    """Select/boolean columns: the chosen option value counts as-is, weight ignored."""
    if stored is None:
        return 0.0
    return get_raw_value(stored)


def score_range(column: ScoreColumn, stored: StoredValue) -> float:
    """
    Range-mapped number columns: first rule containing the magnitude wins.

    Rules are scanned in list order, so overlapping intervals resolve to the
    earlier rule. No matching rule scores 0.
    """
    magnitude = get_raw_value(stored)
    for rule in column.range_rules:
        if rule.contains(magnitude):
            return rule.score
    return 0.0


def score_product(column: ScoreColumn, stored: StoredValue) -> float:
    """Product columns: factor_a * factor_b * weight, then rounding."""
    if isinstance(stored, ProductValue):
        factor_a = parse_number(stored.factors[0])
        factor_b = parse_number(stored.factors[1])
        product = factor_a * factor_b
    else:
        # A bare number stored before the column switched to product mode
        product = get_raw_value(stored)
    return apply_rounding(product * column.weight, column.rounding)


def score_standard(column: ScoreColumn, stored: StoredValue) -> float:
    """Standard number columns: value * weight, then rounding."""
    return apply_rounding(get_raw_value(stored) * column.weight, column.rounding)


def column_contribution(column: ScoreColumn, stored: StoredValue) -> float:
    """
    Calculate how much a column adds to a player's total.

    Exactly one rule set governs a column, chosen in priority order:
        1. select/boolean -> option value
        2. number with range rules -> first matching rule's score
        3. number in product mode -> factor product * weight, rounded
        4. number -> value * weight, rounded
        5. text -> always 0, regardless of is_scoring

    Never raises; malformed or absent input contributes 0.

    Args:
        column: Column definition
        stored: Stored cell value (may be None)

    Returns:
        Contribution as a float
    """
    if column.data_kind in OPTION_KINDS:
        return score_option(column, stored)
    if column.data_kind != 'number':
        return 0.0
    if column.range_rules:
        return score_range(column, stored)
    if column.calculation_mode == 'product':
        return score_product(column, stored)
    return score_standard(column, stored)


def product_preview(column: ScoreColumn, stored: StoredValue) -> float:
    """Weighted, rounded preview shown beside the two product factors."""
    return score_product(column, stored)


def score_breakdown(player: Player, template: GameTemplate) -> Tuple[float, dict[str, float]]:
    """
    Score every scoring column for a player.

    Args:
        player: Player with stored values
        template: Template whose columns define the scoring

    Returns:
        Tuple of (total, breakdown) where breakdown maps column id to its
        non-zero contribution
    """
    total = 0.0
    breakdown = {}

    for column in template.columns:
        if not column.is_scoring:
            continue
        points = column_contribution(column, player.scores.get(column.id))
        if points:
            breakdown[column.id] = points
        total += points

    return total, breakdown


def calculate_player_total(player: Player, template: GameTemplate) -> float:
    """Recompute a player's total from scratch."""
    total, _ = score_breakdown(player, template)
    return total
