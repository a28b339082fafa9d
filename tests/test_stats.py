import pytest

from dynastyval.calibration import mape, rank, spearman, weighted_overall


def test_rank_averages_ties():
    assert rank([10, 20, 20, 5]) == [2.0, 3.5, 3.5, 1.0]


def test_spearman_identity_and_reverse():
    values = [3.0, 1.0, 4.0, 1.5, 9.0]
    assert spearman(values, values) == pytest.approx(1.0)
    assert spearman(values, [-v for v in values]) == pytest.approx(-1.0)


def test_spearman_short_input_is_zero():
    assert spearman([], []) == 0.0
    assert spearman([1.0], [2.0]) == 0.0


def test_spearman_length_mismatch():
    with pytest.raises(ValueError):
        spearman([1.0, 2.0], [1.0])


def test_mape_skips_zero_actuals_in_numerator():
    assert mape([110, 50], [100, 0]) == pytest.approx(0.05)
    assert mape([], []) == 0.0


def test_weighted_overall():
    assert weighted_overall({"QB": 1.0, "RB": 0.0}, {"QB": 1, "RB": 3}) == pytest.approx(0.25)
    assert weighted_overall({}, {}) == 0.0
