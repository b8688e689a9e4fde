"""Pydantic schemas for templates, columns and app configuration."""

import time

from pydantic import BaseModel, Field, field_validator


class SelectOption(BaseModel):
    """Fixed option for a select or boolean column."""

    value: float
    label: str = ''

    class Config:
        extra = 'forbid'
        frozen = True


class RangeRule(BaseModel):
    """Interval-to-score lookup entry. Missing bounds are unbounded."""

    min: float | None = None
    max: float | None = None
    score: float

    def contains(self, magnitude: float) -> bool:
        """Check whether magnitude falls inside the inclusive [min, max] interval."""
        above_min = self.min is None or magnitude >= self.min
        below_max = self.max is None or magnitude <= self.max
        return above_min and below_max

    class Config:
        extra = 'forbid'
        frozen = True


class ScoreColumn(BaseModel):
    """A single scoring or tracking category in a template."""

    id: str = Field(..., min_length=1)
    name: str = ''
    data_kind: str = Field(default='number', pattern=r'^(number|text|select|boolean)$')
    is_scoring: bool = True
    weight: float = 1.0
    unit: str = ''
    rounding: str = Field(default='none', pattern=r'^(none|floor|ceil|round)$')
    range_rules: list[RangeRule] = Field(default_factory=list)
    options: list[SelectOption] = Field(default_factory=list)
    calculation_mode: str = Field(default='standard', pattern=r'^(standard|product)$')
    factor_units: tuple[str, str] | None = None
    quick_buttons: list[float] = Field(default_factory=list)

    @property
    def is_product(self) -> bool:
        """Product mode only applies to number columns without range rules."""
        return (
            self.data_kind == 'number'
            and not self.range_rules
            and self.calculation_mode == 'product'
        )

    @property
    def accepts_keypad(self) -> bool:
        return self.data_kind == 'number'

    class Config:
        extra = 'forbid'
        frozen = True


class GameTemplate(BaseModel):
    """Ordered set of columns defining how a game is scored."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    columns: list[ScoreColumn] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.time)

    @field_validator('columns')
    @classmethod
    def validate_unique_ids(cls, v):
        """Ensure column ids are unique within the template."""
        seen = set()
        for column in v:
            if column.id in seen:
                raise ValueError(f'Duplicate column id: {column.id}')
            seen.add(column.id)
        return v

    def get_column(self, column_id: str) -> ScoreColumn | None:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    class Config:
        extra = 'forbid'
        frozen = True


class AppConfig(BaseModel):
    """Application configuration settings."""

    default_player_count: int = Field(..., ge=1, le=99)
    min_players: int = Field(..., ge=1)
    max_players: int = Field(..., ge=1, le=99)
    player_colors: list[str] = Field(..., min_length=1)
    player_name_format: str = 'Player {n}'
    default_factor_units: tuple[str, str] = ('Quantity', 'Unit value')
    history_limit: int = Field(default=20, ge=1)
    default_direction: str = Field(default='vertical', pattern=r'^(vertical|horizontal)$')

    @field_validator('max_players')
    @classmethod
    def validate_player_bounds(cls, v, info):
        """Ensure max_players is not below min_players."""
        min_players = info.data.get('min_players')
        if min_players is not None and v < min_players:
            raise ValueError(f'max_players ({v}) is below min_players ({min_players})')
        return v

    @field_validator('player_colors')
    @classmethod
    def validate_colors(cls, v):
        """Ensure colors are hex strings."""
        for color in v:
            if not color.startswith('#') or len(color) not in (4, 7):
                raise ValueError(f'Invalid color: {color}')
        return v

    @field_validator('player_name_format')
    @classmethod
    def validate_name_format(cls, v):
        """Ensure the name format has a {n} placeholder."""
        if '{n}' not in v:
            raise ValueError(f'Player name format needs a {{n}} placeholder, got {v!r}')
        return v

    class Config:
        extra = 'forbid'
