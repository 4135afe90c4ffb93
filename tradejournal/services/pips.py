"""Pips and points calculator for forex pairs and Deriv synthetic indices."""

import math
from dataclasses import dataclass
from enum import Enum


class InstrumentType(str, Enum):
    FOREX = "forex"
    SYNTHETIC = "synthetic"


# Profit per pip per lot
FOREX_PIP_VALUE = 10.0
JPY_PIP_VALUE = 1.0  # 0.01 price unit * 100
BOOM_CRASH_PIP_VALUE = 0.2
SYNTHETIC_PIP_VALUE = 1.0


@dataclass(frozen=True)
class PipResult:
    pips: float
    profit: float
    points: float | None = None  # synthetics only

    def to_dict(self) -> dict:
        return {
            "pips": round(self.pips, 1),
            "profit": round(self.profit, 2),
            "points": round(self.points, 5) if self.points is not None else None,
        }


def _positive(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive number, got {value}")
    return value


def calculate_pips(
    entry_price: float,
    exit_price: float,
    lot_size: float,
    symbol: str,
    instrument: InstrumentType | str = InstrumentType.FOREX,
) -> PipResult:
    """Pip distance and money result of a move from entry to exit.

    Forex: JPY pairs quote to 2 decimals (1 pip = 0.01), the rest to 4
    (1 pip = 0.0001); pips keep the direction of the move.
    Synthetics: the absolute point move times 100, valued per index family.
    """
    entry = _positive(entry_price, "Entry price")
    exit_ = _positive(exit_price, "Exit price")
    lots = _positive(lot_size, "Lot size")
    instrument = InstrumentType(instrument)
    symbol = symbol.upper()

    if instrument == InstrumentType.FOREX:
        if "JPY" in symbol:
            pips = (exit_ - entry) * 100
            return PipResult(pips=pips, profit=pips * lots * JPY_PIP_VALUE)
        pips = (exit_ - entry) * 10000
        return PipResult(pips=pips, profit=pips * lots * FOREX_PIP_VALUE)

    points = abs(exit_ - entry)
    pips = points * 100
    if "BOOM" in symbol or "CRASH" in symbol:
        pip_value = BOOM_CRASH_PIP_VALUE
    else:
        pip_value = SYNTHETIC_PIP_VALUE
    return PipResult(pips=pips, profit=pips * lots * pip_value, points=points)
