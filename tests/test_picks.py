import pytest

from dynastyval.models import PickRecord
from dynastyval.valuation import pick_value, round_multiplier, value_pick


def test_current_year_first_round_is_base_value():
    assert pick_value(2026, 1, current_year=2026) == pytest.approx(1000)


def test_value_strictly_decreases_by_round():
    values = [pick_value(2026, round_number, current_year=2026) for round_number in range(1, 8)]
    assert all(later < earlier for earlier, later in zip(values, values[1:]))
    assert values[1] == pytest.approx(400)
    assert values[3] == pytest.approx(50)


def test_value_strictly_decreases_by_year():
    values = [pick_value(year, 2, current_year=2026) for year in range(2026, 2030)]
    assert all(later < earlier for earlier, later in zip(values, values[1:]))
    assert pick_value(2028, 1, current_year=2026) == pytest.approx(810)


def test_past_years_are_not_discounted():
    assert pick_value(2024, 1, current_year=2026) == pytest.approx(1000)


def test_zero_baseline_is_respected():
    assert pick_value(2026, 1, 0, current_year=2026) == 0.0
    assert pick_value(2026, 1, 2000, current_year=2026) == pytest.approx(2000)


def test_round_below_one_is_rejected():
    with pytest.raises(ValueError):
        round_multiplier(0)
    with pytest.raises(ValueError):
        pick_value(2026, -1, current_year=2026)


def test_value_pick_record():
    pick = PickRecord(pick_id="2027-2", year=2027, round=2)
    assert value_pick(pick, current_year=2026) == pytest.approx(360)
