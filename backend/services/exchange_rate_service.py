"""Historical exchange-rate lookup with a bounded look-back.

Rates are read from FX index points (``FX_<BASE>_<QUOTE>``). A pair's rate is
the amount of QUOTE currency bought by one unit of BASE, so ``USD/ARS = 1000``
means one dollar costs a thousand pesos.

There is no process-wide "current rate": every lookup names its as-of date.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from config import settings
from models import IndexPoint
from services.exceptions import NoRateAvailable
from utils.dates import iter_days_back, month_end

logger = logging.getLogger(__name__)

FX_PREFIX = "FX_"


@dataclass(frozen=True)
class CurrencyPair:
    """An ordered currency pair such as USD/ARS."""

    base: str
    quote: str

    @classmethod
    def parse(cls, value: "str | CurrencyPair") -> "CurrencyPair":
        """Parse ``"USD/ARS"`` (or pass an existing pair through)."""
        if isinstance(value, CurrencyPair):
            return value
        parts = value.split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Invalid currency pair: {value!r}")
        return cls(parts[0].strip().upper(), parts[1].strip().upper())

    @classmethod
    def from_index_type(cls, index_type: str) -> Optional["CurrencyPair"]:
        """Map ``FX_USD_ARS`` to USD/ARS; returns None for non-FX series."""
        if not index_type.startswith(FX_PREFIX):
            return None
        parts = index_type[len(FX_PREFIX):].split("_")
        if len(parts) != 2 or not all(parts):
            return None
        return cls(parts[0].upper(), parts[1].upper())

    @property
    def index_type(self) -> str:
        return f"{FX_PREFIX}{self.base}_{self.quote}"

    @property
    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.quote, self.base)

    @property
    def is_identity(self) -> bool:
        return self.base == self.quote

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"


def is_fx_index(index_type: str) -> bool:
    """True for index types that hold exchange-rate quotes."""
    return CurrencyPair.from_index_type(index_type) is not None


class _RateSeries:
    """Quotes for one pair, indexed by day."""

    def __init__(self, quotes: dict[date, Decimal]):
        self.by_day = dict(quotes)
        self.days = sorted(self.by_day)

    def lookup(self, on: date, lookback_days: int) -> Decimal:
        for day in iter_days_back(on, lookback_days):
            value = self.by_day.get(day)
            if value is not None:
                return value
        return self.by_day[self.days[-1]]


class ExchangeRateResolver:
    """Resolves the best-known rate for a pair on a given date.

    Lookup order:

    1. the exact day's quote;
    2. the most recent quote within ``lookback_days`` before that day;
    3. the most recent quote in the whole series.

    Only a pair with no quotes at all (in either direction) raises
    :class:`NoRateAvailable`. Reporting has to render even when the
    historical point is missing, so the resolver degrades instead of failing.
    """

    def __init__(
        self,
        quotes: dict[CurrencyPair, dict[date, Decimal]] | None = None,
        lookback_days: int | None = None,
    ):
        self.lookback_days = (
            settings.FX_LOOKBACK_DAYS if lookback_days is None else lookback_days
        )
        self._series: dict[CurrencyPair, _RateSeries] = {
            pair: _RateSeries(series)
            for pair, series in (quotes or {}).items()
            if series
        }

    @classmethod
    def from_points(
        cls, points: Iterable, lookback_days: int | None = None
    ) -> "ExchangeRateResolver":
        """Build a resolver from objects with ``type``, ``date`` and ``value``.

        Points whose type is not an FX series are ignored, as are
        non-positive quotes.
        """
        quotes: dict[CurrencyPair, dict[date, Decimal]] = {}
        for point in points:
            pair = CurrencyPair.from_index_type(point.type)
            if pair is None:
                continue
            value = Decimal(point.value)
            if value <= 0:
                logger.warning(
                    "Ignoring non-positive %s quote on %s", pair, point.date
                )
                continue
            quotes.setdefault(pair, {})[point.date] = value
        return cls(quotes, lookback_days=lookback_days)

    def has_quotes(self, pair: "str | CurrencyPair") -> bool:
        """True if the pair (or its inverse) can be resolved."""
        pair = CurrencyPair.parse(pair)
        return (
            pair.is_identity
            or pair in self._series
            or pair.inverse in self._series
        )

    def rate(self, on: date, pair: "str | CurrencyPair") -> Decimal:
        """Best-known rate for ``pair`` as of ``on``.

        Raises:
            NoRateAvailable: If neither the pair nor its inverse has quotes.
        """
        pair = CurrencyPair.parse(pair)
        if pair.is_identity:
            return Decimal("1")
        series = self._series.get(pair)
        if series is not None:
            return series.lookup(on, self.lookback_days)
        inverse = self._series.get(pair.inverse)
        if inverse is not None:
            return Decimal("1") / inverse.lookup(on, self.lookback_days)
        raise NoRateAvailable(str(pair))

    def month_close_rate(self, month: date, pair: "str | CurrencyPair") -> Decimal:
        """Rate as of the last calendar day of ``month``."""
        return self.rate(month_end(month), pair)

    def convert(
        self, amount: Decimal, from_currency: str, to_currency: str, on: date
    ) -> Decimal:
        """Convert ``amount`` at the rate known on ``on``. Full precision."""
        return amount * self.rate(on, CurrencyPair(from_currency.upper(), to_currency.upper()))

    def latest(self, pair: "str | CurrencyPair") -> tuple[date, Decimal]:
        """Most recent quote date and rate for the pair."""
        pair = CurrencyPair.parse(pair)
        series = self._series.get(pair)
        if series is not None:
            day = series.days[-1]
            return day, series.by_day[day]
        inverse = self._series.get(pair.inverse)
        if inverse is not None:
            day = inverse.days[-1]
            return day, Decimal("1") / inverse.by_day[day]
        raise NoRateAvailable(str(pair))


class ExchangeRateService:
    """Loads resolvers from the index point store."""

    @staticmethod
    def load_resolver(db: Session, lookback_days: int | None = None) -> ExchangeRateResolver:
        """Build a resolver over every stored FX quote."""
        points = (
            db.query(IndexPoint)
            .filter(IndexPoint.type.like(f"{FX_PREFIX}%"))
            .order_by(IndexPoint.date.asc())
            .all()
        )
        return ExchangeRateResolver.from_points(points, lookback_days=lookback_days)

    @staticmethod
    def get_rate(db: Session, on: date, pair: "str | CurrencyPair") -> Decimal:
        """One-off lookup; loads only the requested pair's series."""
        pair = CurrencyPair.parse(pair)
        points = (
            db.query(IndexPoint)
            .filter(IndexPoint.type.in_([pair.index_type, pair.inverse.index_type]))
            .all()
        )
        return ExchangeRateResolver.from_points(points).rate(on, pair)
