"""
Unit tests for realized profit and loss.

Pure arithmetic; no database.
"""

from decimal import Decimal

import pytest

from flowjournal.domains.trading.domain.services import calculate_profit_loss, realized_profit_loss
from flowjournal.domains.trading.domain.value_objects import TradeDirection, TradeStatus


class TestCalculateProfitLoss:
    """Test the single profit/loss formula."""

    def test_long_winner(self):
        """WHEN a long trade exits above entry
        THEN profit is the price gain times quantity less fees
        """
        result = calculate_profit_loss(
            TradeDirection.LONG, Decimal("100"), Decimal("110"), Decimal("10"), Decimal("5")
        )

        assert result.amount == Decimal("95.00")
        assert result.percent == Decimal("10.00")

    def test_short_winner_when_price_falls(self):
        """WHEN a short trade exits below entry
        THEN the result is positive
        """
        result = calculate_profit_loss(
            TradeDirection.SHORT, Decimal("50"), Decimal("45"), Decimal("2")
        )

        assert result.amount == Decimal("10.00")
        assert result.percent == Decimal("10.00")

    def test_short_loser_when_price_rises(self):
        result = calculate_profit_loss(
            TradeDirection.SHORT, Decimal("50"), Decimal("55"), Decimal("2")
        )

        assert result.amount == Decimal("-10.00")
        assert result.percent == Decimal("-10.00")

    @pytest.mark.parametrize("direction,exit_price,positive", [
        (TradeDirection.LONG, Decimal("120"), True),
        (TradeDirection.LONG, Decimal("80"), False),
        (TradeDirection.SHORT, Decimal("80"), True),
        (TradeDirection.SHORT, Decimal("120"), False),
    ])
    def test_sign_follows_direction(self, direction, exit_price, positive):
        result = calculate_profit_loss(direction, Decimal("100"), exit_price, Decimal("1"))

        assert (result.amount > 0) is positive
        assert (result.percent > 0) is positive

    def test_fees_can_turn_a_small_gain_into_a_loss(self):
        result = calculate_profit_loss(
            TradeDirection.LONG, Decimal("100"), Decimal("101"), Decimal("1"), Decimal("2.50")
        )

        assert result.amount == Decimal("-1.50")
        assert result.percent == Decimal("1.00")

    def test_decimal_precision_has_no_float_drift(self):
        """WHEN prices are not representable in binary floating point
        THEN the result is still exact
        """
        result = calculate_profit_loss(
            TradeDirection.LONG, Decimal("0.1"), Decimal("0.3"), Decimal("3")
        )

        assert result.amount == Decimal("0.60")

    def test_rounds_half_even_to_cents(self):
        # 0.005 * 1 rounds to 0.00, 0.015 rounds to 0.02
        down = calculate_profit_loss(TradeDirection.LONG, Decimal("1"), Decimal("1.005"), Decimal("1"))
        up = calculate_profit_loss(TradeDirection.LONG, Decimal("1"), Decimal("1.015"), Decimal("1"))

        assert down.amount == Decimal("0.00")
        assert up.amount == Decimal("0.02")


class TestRealizedProfitLoss:
    """Derived fields exist only for closed trades with an exit price."""

    def test_open_trade_has_no_result(self):
        assert realized_profit_loss(
            TradeStatus.OPEN, TradeDirection.LONG, Decimal("100"), Decimal("110"), Decimal("1"), Decimal("0")
        ) is None

    def test_closed_without_exit_price_has_no_result(self):
        assert realized_profit_loss(
            TradeStatus.CLOSED, TradeDirection.LONG, Decimal("100"), None, Decimal("1"), Decimal("0")
        ) is None

    def test_cancelled_trade_has_no_result(self):
        assert realized_profit_loss(
            TradeStatus.CANCELLED, TradeDirection.LONG, Decimal("100"), Decimal("110"), Decimal("1"), Decimal("0")
        ) is None

    def test_closed_with_exit_price(self):
        result = realized_profit_loss(
            TradeStatus.CLOSED, TradeDirection.LONG, Decimal("100"), Decimal("110"), Decimal("10"), Decimal("5")
        )

        assert result.amount == Decimal("95.00")
