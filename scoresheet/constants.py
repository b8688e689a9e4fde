"""Constants and mappings for the scoresheet engine."""

# Kinds whose stored value is an option value used as-is
OPTION_KINDS = ('select', 'boolean')

# Keypad keys emitted by the input surface
KEY_DECIMAL = '.'
KEY_TOGGLE_SIGN = '+/-'
KEY_BACKSPACE = 'backspace'
KEY_NEXT = 'next'
KEY_CLEAR = 'clear'
DIGIT_KEYS = tuple(str(d) for d in range(10))

# Focus movement after an advance
DIRECTION_VERTICAL = 'vertical'      # next column, same player
DIRECTION_HORIZONTAL = 'horizontal'  # next player, same column

SESSION_ACTIVE = 'active'
SESSION_COMPLETED = 'completed'
