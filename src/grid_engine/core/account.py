"""Account balance and drawdown tracking for one backtest run."""

from grid_engine.core.types import GridMode


class Account:
    """
    Running balance of a single run.

    Leveraged runs measure drawdown as the relative drop of ``balance`` from
    its peak. Spot runs measure the absolute drop of cumulative P&L from its
    peak (which starts at zero), expressed as a percentage of the investment.
    """

    def __init__(self, investment: float, mode: GridMode) -> None:
        self.investment = investment
        self.mode = mode
        self.balance = investment
        self.peak_balance = investment
        self.max_drawdown_pct = 0.0
        self.total_fees = 0.0

    def charge_fee(self, fee: float) -> None:
        """Debit an entry fee immediately."""
        self.balance -= fee
        self.total_fees += fee

    def realize(self, net_profit: float, fee: float) -> None:
        """Book the net result of an exit; ``fee`` is already inside ``net_profit``."""
        self.balance += net_profit
        self.total_fees += fee

    def sample(self) -> float:
        """Update peak and max drawdown at a candle boundary, return current drawdown."""
        if self.balance > self.peak_balance:
            self.peak_balance = self.balance

        if self.mode == GridMode.SPOT:
            drawdown = (self.peak_balance - self.balance) / self.investment * 100
        elif self.peak_balance > 0:
            drawdown = (self.peak_balance - self.balance) / self.peak_balance * 100
        else:
            drawdown = 0.0

        if drawdown > self.max_drawdown_pct:
            self.max_drawdown_pct = drawdown
        return drawdown
