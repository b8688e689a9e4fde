from .models import (
    GameSession,
    Player,
    ProductValue,
    StandardValue,
    StoredValue,
)
from .schemas import AppConfig, GameTemplate, RangeRule, ScoreColumn, SelectOption
from .parsing import format_number, parse_number
from .scoring import (
    apply_rounding,
    calculate_player_total,
    column_contribution,
    get_raw_value,
    product_preview,
    score_breakdown,
)
from .keypad import (
    EntryState,
    KeyResult,
    advance,
    apply_key,
    backspace,
    clear,
    press_decimal,
    press_digit,
    select_factor,
    toggle_sign,
    type_keys,
)
from .session import ScoreSession
from .ranking import get_player_rank, get_score_rank, get_tie_count, get_winners, rank_players
from .validators import validate_column, validate_session, validate_template
from .storage import (
    export_template,
    import_template,
    load_session,
    load_template,
    save_session,
)

__all__ = [
    # Models
    'GameSession',
    'Player',
    'ProductValue',
    'StandardValue',
    'StoredValue',
    # Schemas
    'AppConfig',
    'GameTemplate',
    'RangeRule',
    'ScoreColumn',
    'SelectOption',
    # Calculator
    'format_number',
    'parse_number',
    'apply_rounding',
    'calculate_player_total',
    'column_contribution',
    'get_raw_value',
    'product_preview',
    'score_breakdown',
    # Keypad entry
    'EntryState',
    'KeyResult',
    'advance',
    'apply_key',
    'backspace',
    'clear',
    'press_decimal',
    'press_digit',
    'select_factor',
    'toggle_sign',
    'type_keys',
    # Session
    'ScoreSession',
    # Ranking
    'get_player_rank',
    'get_score_rank',
    'get_tie_count',
    'get_winners',
    'rank_players',
    # Validation
    'validate_column',
    'validate_session',
    'validate_template',
    # Storage
    'export_template',
    'import_template',
    'load_session',
    'load_template',
    'save_session',
]
