import pytest

from dynastyval.valuation import evaluate_trade


def test_trade_within_five_percent_is_fair():
    result = evaluate_trade([500.4, 500.4], [960])
    assert result.verdict == "FAIR"
    assert result.total_a == pytest.approx(1000.8)
    assert result.display_total_a == 1001


def test_trade_favoring_one_side():
    result = evaluate_trade([1000], [800])
    assert result.verdict == "FAVORS_A"
    assert result.percent_difference == pytest.approx(20)
    assert evaluate_trade([800], [1000]).verdict == "FAVORS_B"


def test_empty_trade_is_fair():
    result = evaluate_trade([], [])
    assert result.verdict == "FAIR"
    assert result.percent_difference == 0.0
