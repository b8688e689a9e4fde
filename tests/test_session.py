"""Tests for live sessions and ranking."""

import pytest

from scoresheet.models import ProductValue, StandardValue
from scoresheet.ranking import get_player_rank, get_score_rank, get_tie_count, get_winners
from scoresheet.schemas import GameTemplate, RangeRule, ScoreColumn, SelectOption
from scoresheet.session import ScoreSession


@pytest.fixture
def template():
    return GameTemplate(
        id='farm',
        name='Farmstead',
        columns=[
            ScoreColumn(id='gold', name='Gold', weight=3, rounding='floor'),
            ScoreColumn(
                id='sheep',
                name='Sheep',
                range_rules=[
                    RangeRule(max=0, score=-1),
                    RangeRule(min=1, max=3, score=1),
                    RangeRule(min=4, score=2),
                ],
            ),
            ScoreColumn(id='goods', name='Goods', calculation_mode='product'),
            ScoreColumn(
                id='road',
                name='Longest road',
                data_kind='select',
                options=[SelectOption(value=2, label='Second'), SelectOption(value=4, label='First')],
            ),
            ScoreColumn(id='notes', name='Notes', data_kind='text', is_scoring=False),
        ],
    )


@pytest.fixture
def scorer(template):
    return ScoreSession.start(template, player_names=['Alice', 'Bob'], direction='vertical')


def ids(scorer):
    return [p.id for p in scorer.players]


class TestStart:
    """Tests for starting a session."""

    def test_named_players(self, scorer, template):
        assert [p.name for p in scorer.players] == ['Alice', 'Bob']
        assert scorer.session.template_id == template.id
        assert scorer.session.status == 'active'
        assert all(p.total_score == 0 for p in scorer.players)

    def test_default_players(self, template):
        scorer = ScoreSession.start(template)
        assert [p.name for p in scorer.players] == ['Player 1', 'Player 2', 'Player 3', 'Player 4']

    def test_player_count_clamped(self, template):
        assert len(ScoreSession.start(template, player_count=50).players) == 12
        assert len(ScoreSession.start(template, player_count=0).players) == 1

    def test_colors_cycle(self, template):
        scorer = ScoreSession.start(template, player_count=10)
        assert scorer.players[0].color == scorer.players[8].color
        assert scorer.players[0].color != scorer.players[1].color

    def test_unknown_direction(self, template):
        with pytest.raises(ValueError):
            ScoreSession.start(template, direction='diagonal')


class TestKeypadEntry:
    """Tests for keypad keys routed through a session."""

    def test_total_updates_live(self, scorer):
        alice = ids(scorer)[0]
        scorer.press(alice, 'gold', '4')
        assert scorer.players[0].total_score == 12
        scorer.press(alice, 'gold', '.')
        scorer.press(alice, 'gold', '9')
        assert scorer.players[0].total_score == 14
        assert scorer.get_value(alice, 'gold') == StandardValue(value='4.9', history=('4.9',))

    def test_next_moves_down_columns(self, scorer):
        """Test vertical direction moves to the player's next number column."""
        alice = ids(scorer)[0]
        moved = scorer.press(alice, 'gold', 'next')
        assert moved is True
        assert scorer.cursor == (alice, 'sheep')
        assert scorer.entry.overwrite is True

    def test_next_from_last_column_moves_to_next_player(self, scorer):
        alice, bob = ids(scorer)
        scorer.focus(alice, 'goods')
        scorer.press(alice, 'goods', 'next')
        assert scorer.cursor == (alice, 'goods')
        scorer.press(alice, 'goods', 'next')
        assert scorer.cursor == (bob, 'gold')

    def test_horizontal_direction(self, template):
        scorer = ScoreSession.start(template, player_names=['Alice', 'Bob'], direction='horizontal')
        alice, bob = ids(scorer)
        scorer.press(alice, 'gold', 'next')
        assert scorer.cursor == (bob, 'gold')
        scorer.press(bob, 'gold', 'next')
        assert scorer.cursor == (alice, 'sheep')

    def test_last_cell_closes_keypad(self, scorer):
        bob = ids(scorer)[1]
        scorer.press(bob, 'sheep', 'next')
        scorer.press(bob, 'goods', 'next')
        scorer.press(bob, 'goods', 'next')
        assert scorer.cursor is None
        assert scorer.entry is None

    def test_type_keys_follows_focus(self, scorer):
        """Test a key stream fills consecutive cells."""
        alice = ids(scorer)[0]
        scorer.type_keys(alice, 'gold', ['2', 'next', '5', 'next', '1', '2', 'next', '5'])
        assert scorer.get_value(alice, 'gold').value == 2
        assert scorer.get_value(alice, 'sheep').value == 5
        assert scorer.get_value(alice, 'goods').factors == (12, 5)
        # 6 + 2 + 60
        assert scorer.players[0].total_score == 68

    def test_product_advance_stays_in_cell(self, scorer):
        alice = ids(scorer)[0]
        moved = scorer.press(alice, 'goods', 'next')
        assert moved is False
        assert scorer.cursor == (alice, 'goods')
        assert scorer.entry.active_factor == 1

    def test_refocus_starts_in_overwrite(self, scorer):
        alice = ids(scorer)[0]
        scorer.type_keys(alice, 'gold', ['1', '2'])
        scorer.blur()
        scorer.press(alice, 'gold', '7')
        assert scorer.get_value(alice, 'gold').value == 7

    def test_clear_key_removes_value(self, scorer):
        alice = ids(scorer)[0]
        scorer.type_keys(alice, 'gold', ['5', 'clear'])
        assert 'gold' not in scorer.players[0].scores
        assert scorer.players[0].total_score == 0

    def test_keypad_rejected_for_select(self, scorer):
        with pytest.raises(ValueError):
            scorer.press(ids(scorer)[0], 'road', '1')

    def test_unknown_cell(self, scorer):
        with pytest.raises(KeyError):
            scorer.press('nobody', 'gold', '1')
        with pytest.raises(KeyError):
            scorer.press(ids(scorer)[0], 'missing', '1')

    def test_select_factor(self, scorer):
        alice = ids(scorer)[0]
        scorer.type_keys(alice, 'goods', ['3', 'next', '4'])
        scorer.select_factor(alice, 'goods', 0)
        scorer.press(alice, 'goods', '+/-')
        assert scorer.get_value(alice, 'goods').factors == (-3, 4)
        assert scorer.players[0].total_score == -12

    def test_stepping_through_bare_product_cell_keeps_value(self, scorer):
        """Test focus and next on a product cell holding a plain number change nothing."""
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'goods', 7)
        before = scorer.get_value(alice, 'goods')
        scorer.focus(alice, 'goods')
        scorer.press(alice, 'goods', 'next')
        scorer.press(alice, 'goods', 'next')
        assert scorer.get_value(alice, 'goods') == before
        assert scorer.players[0].total_score == 7

    def test_bare_product_cell_edits_factor_b(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'goods', 7)
        scorer.type_keys(alice, 'goods', ['next', '3'])
        assert scorer.get_value(alice, 'goods').factors == (7, 3)
        assert scorer.players[0].total_score == 21


class TestDirectValues:
    """Tests for set_value, clear_value and quick_add."""

    def test_select_value(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'road', 4)
        assert scorer.players[0].total_score == 4

    def test_text_never_counts(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'gold', 5)
        scorer.set_value(alice, 'sheep', 0)
        scorer.set_value(alice, 'notes', '1000 points of flavor')
        # floor(15) + (-1)
        assert scorer.players[0].total_score == 14

    def test_set_number_wraps_value(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'gold', 2)
        assert isinstance(scorer.get_value(alice, 'gold'), StandardValue)

    def test_clear_value(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'road', 2)
        scorer.clear_value(alice, 'road')
        assert scorer.get_value(alice, 'road') is None
        assert scorer.players[0].total_score == 0

    def test_set_none_clears(self, scorer):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'road', 2)
        scorer.set_value(alice, 'road', None)
        assert 'road' not in scorer.players[0].scores

    def test_quick_add_history(self, scorer):
        alice = ids(scorer)[0]
        scorer.quick_add(alice, 'gold', 5)
        updated = scorer.quick_add(alice, 'gold', -2)
        assert updated.value == 3
        assert updated.history == ('+5', '-2')
        assert scorer.players[0].total_score == 9

    def test_quick_add_rejects_product(self, scorer):
        with pytest.raises(ValueError):
            scorer.quick_add(ids(scorer)[0], 'goods', 1)

    def test_quick_buttons_limit_deltas(self, scorer, template):
        alice = ids(scorer)[0]
        columns = [
            c.model_copy(update={'quick_buttons': [5]}) if c.id == 'gold' else c for c in template.columns
        ]
        scorer.update_template(template.model_copy(update={'columns': columns}))
        assert scorer.quick_buttons('gold') == [5, -5]
        assert scorer.quick_buttons('sheep') == []

        assert scorer.quick_add(alice, 'gold', -5).value == -5
        with pytest.raises(ValueError, match='no quick button for 2'):
            scorer.quick_add(alice, 'gold', 2)
        assert scorer.get_value(alice, 'gold').value == -5

    def test_typing_after_quick_add_keeps_history(self, scorer):
        alice = ids(scorer)[0]
        scorer.quick_add(alice, 'gold', 5)
        scorer.press(alice, 'gold', '8')
        scorer.press(alice, 'gold', '1')
        assert scorer.get_value(alice, 'gold').history == ('+5', '81')
        assert scorer.players[0].total_score == 243


class TestLifecycle:
    """Tests for template updates, reset and finishing."""

    def test_update_template_recomputes(self, scorer, template):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'gold', 2)
        assert scorer.players[0].total_score == 6

        columns = [
            c.model_copy(update={'weight': 10}) if c.id == 'gold' else c for c in template.columns
        ]
        scorer.update_template(template.model_copy(update={'columns': columns}))
        assert scorer.players[0].total_score == 20

    def test_update_template_drops_removed_columns(self, scorer, template):
        alice = ids(scorer)[0]
        scorer.set_value(alice, 'road', 4)
        scorer.focus(alice, 'gold')
        columns = [c for c in template.columns if c.id != 'road']
        scorer.update_template(template.model_copy(update={'columns': columns}))
        assert 'road' not in scorer.players[0].scores
        assert scorer.players[0].total_score == 0
        assert scorer.cursor == (alice, 'gold')

    def test_reset(self, scorer):
        alice = ids(scorer)[0]
        old_id = scorer.session.id
        scorer.set_value(alice, 'gold', 3)
        scorer.reset()
        assert scorer.session.id != old_id
        assert ids(scorer)[0] == alice
        assert scorer.players[0].scores == {}
        assert scorer.players[0].total_score == 0
        assert scorer.cursor is None

    def test_finish(self, scorer):
        scorer.finish()
        assert scorer.session.status == 'completed'

    def test_round_trip_recomputes_totals(self, scorer, template):
        """Test restored sessions rebuild totals instead of trusting the cache."""
        alice = ids(scorer)[0]
        scorer.type_keys(alice, 'goods', ['3', 'next', '4'])
        data = scorer.to_dict()
        data['players'][0]['total_score'] = 999
        restored = ScoreSession.from_dict(template, data)
        assert restored.players[0].total_score == 12
        assert restored.get_value(alice, 'goods') == ProductValue(factors=(3, 4), history=('12',))


class TestRanking:
    """Tests for ranking helpers."""

    def test_dense_rank(self):
        values = [100, 100, 90]
        assert [get_score_rank(v, values) for v in values] == [1, 1, 2]

    def test_competition_rank(self):
        values = [100, 100, 90]
        assert [get_player_rank(v, values) for v in values] == [1, 1, 3]

    def test_tie_count(self):
        assert get_tie_count(100, [100, 100, 90]) == 2
        assert get_tie_count(90, [100, 100, 90]) == 1
        assert get_tie_count(5, []) == 1

    def test_empty_values(self):
        assert get_score_rank(5, []) == 1
        assert get_player_rank(5, []) == 1

    def test_winners_and_rankings(self, scorer):
        alice, bob = ids(scorer)
        scorer.set_value(alice, 'road', 4)
        scorer.set_value(bob, 'road', 2)
        assert scorer.winners() == [alice]
        assert [(rank, p.name) for rank, p in scorer.rankings()] == [(1, 'Alice'), (2, 'Bob')]

    def test_tied_winners(self, scorer):
        assert scorer.winners() == ids(scorer)

    def test_no_players(self):
        assert get_winners([]) == []
