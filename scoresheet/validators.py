"""Validation functions for templates and session consistency."""

from .models import GameSession, ProductValue, StandardValue
from .parsing import is_numeric_text
from .schemas import GameTemplate, ScoreColumn
from .scoring import calculate_player_total


def validate_column(column: ScoreColumn) -> list[str]:
    """
    Check a single column definition for authoring mistakes.

    Checks:
    - Column has a name
    - Select columns have options, with no duplicate values
    - Range rules have min <= max
    - Range rules are not combined with product mode
    - Text columns are not marked as scoring
    - Quick buttons only on standard number columns, and never 0

    Args:
        column: Column to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    label = column.name or column.id

    if not column.name.strip():
        errors.append(f'Column {column.id} has no name')

    if column.data_kind == 'select':
        if not column.options:
            errors.append(f'{label} is a select column with no options')
        values = [option.value for option in column.options]
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            errors.append(
                f'{label} has duplicate option values: {", ".join(f"{v:g}" for v in duplicates)}'
            )

    for index, rule in enumerate(column.range_rules, 1):
        if rule.min is not None and rule.max is not None and rule.min > rule.max:
            errors.append(f'{label} range rule {index} has min {rule.min:g} > max {rule.max:g}')

    if column.range_rules and column.calculation_mode == 'product':
        errors.append(f'{label} combines range rules with product mode (pick one)')

    if column.range_rules and column.data_kind != 'number':
        errors.append(f'{label} has range rules but is a {column.data_kind} column')

    if column.data_kind == 'text' and column.is_scoring:
        errors.append(f'{label} is a text column marked as scoring')

    if column.quick_buttons:
        if column.data_kind != 'number' or column.is_product:
            errors.append(f'{label} has quick buttons but is not a standard number column')
        if 0 in column.quick_buttons:
            errors.append(f'{label} has a quick button of 0')

    return errors


def validate_template(template: GameTemplate) -> list[str]:
    """
    Validate a template before it is saved or used for a session.

    Column id uniqueness is enforced by the schema itself; this covers the
    authoring rules a schema can't express.

    Args:
        template: Template to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not template.columns:
        errors.append(f'{template.name} has no columns')

    for column in template.columns:
        errors.extend(validate_column(column))

    return errors


def validate_session(session: GameSession, template: GameTemplate) -> list[str]:
    """
    Check that a session is internally consistent with its template.

    Sanity checks:
    - Session belongs to the template
    - Cached totals match a fresh recompute
    - No values stored for unknown columns
    - Text stored in number columns parses to a number

    Args:
        session: Session to check
        template: Template the session is played with

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    columns = {column.id: column for column in template.columns}

    if session.template_id != template.id:
        warnings.append(
            f'Session {session.id} belongs to template {session.template_id}, not {template.id}'
        )

    for player in session.players:
        expected = calculate_player_total(player, template)
        if abs(expected - player.total_score) > 1e-9:
            warnings.append(
                f'{player.name} cached total ({player.total_score:g}) != recomputed ({expected:g})'
            )

        for column_id, stored in player.scores.items():
            column = columns.get(column_id)
            if column is None:
                warnings.append(f'{player.name} has a value for unknown column {column_id}')
                continue
            if column.data_kind != 'number':
                continue
            if isinstance(stored, (StandardValue, ProductValue)):
                continue
            # Empty text and a lone "-" are legitimate mid-entry states
            if isinstance(stored, str) and stored.strip() not in ('', '-'):
                if not is_numeric_text(stored):
                    warnings.append(
                        f'{player.name} has unparsable value {stored!r} in {column.name or column.id}'
                    )

    return warnings
