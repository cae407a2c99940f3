"""Tracked markets and category display metadata.

The registry is read-only for the lifetime of the engine. Order matters:
it drives display order and the dataStart/dataEnd tie-break.
"""

from __future__ import annotations

from market_returns.core.models import (
    CategoryInfo,
    Instrument,
    MarketCategory,
    MarketId,
    SourceTag,
)


def _m(
    id: str,
    name: str,
    category: MarketCategory,
    description: str,
    color: str,
    source_id: str,
    source: SourceTag = SourceTag.YAHOO,
) -> Instrument:
    return Instrument(
        id=id,
        name=name,
        category=category,
        description=description,
        color=color,
        source=source,
        source_id=source_id,
    )


_EQ = MarketCategory.EQUITIES
_BD = MarketCategory.BONDS
_CM = MarketCategory.COMMODITIES
_EN = MarketCategory.ENERGY
_RE = MarketCategory.REAL_ESTATE
_FX = MarketCategory.FOREX
_CR = MarketCategory.CRYPTO

MARKETS: tuple[Instrument, ...] = (
    # Equities
    _m("sp500", "S&P 500", _EQ, "US Large Cap Stocks", "#6366F1", "^GSPC"),
    _m("dow", "Dow Jones", _EQ, "US Blue Chip Stocks", "#4F46E5", "^DJI"),
    _m("nasdaq", "Nasdaq 100", _EQ, "US Tech Stocks", "#8B5CF6", "^NDX"),
    _m("russell", "Russell 2000", _EQ, "US Small Cap Stocks", "#A855F7", "^RUT"),
    _m("intl", "Intl Developed", _EQ, "MSCI EAFE (EFA)", "#7C3AED", "EFA"),
    _m("emerging", "Emerging Mkts", _EQ, "MSCI Emerging (EEM)", "#C084FC", "EEM"),
    _m("vwo", "EM Vanguard", _EQ, "Vanguard FTSE EM (VWO)", "#E879F9", "VWO"),
    # Fixed income
    _m("treasury_10y", "7-10Y Treasury", _BD, "Treasury Bond ETF (IEF)", "#06B6D4", "IEF"),
    _m("treasury_long", "20+ Yr Treasury", _BD, "Long-Term Treasuries (TLT)", "#0891B2", "TLT"),
    _m("corp_ig", "Corp IG Bonds", _BD, "Investment Grade (LQD)", "#0EA5E9", "LQD"),
    _m("corp_hy", "High Yield", _BD, "Junk Bonds (HYG)", "#38BDF8", "HYG"),
    _m("em_bonds", "EM Bonds", _BD, "Emerging Market Bonds (EMB)", "#67E8F9", "EMB"),
    # Commodities
    _m("gold", "Gold", _CM, "Gold Futures (GC=F)", "#F59E0B", "GC=F"),
    _m("silver", "Silver", _CM, "Silver Futures (SI=F)", "#94A3B8", "SI=F"),
    _m("copper", "Copper", _CM, "Copper Futures (HG=F)", "#B45309", "HG=F"),
    _m("oil", "Crude Oil", _CM, "WTI Crude (CL=F)", "#78716C", "CL=F"),
    # Energy
    _m("natgas", "Natural Gas", _EN, "Natural Gas Futures (NG=F)", "#F97316", "NG=F"),
    _m("brent", "Brent Crude", _EN, "Brent Oil (BZ=F)", "#EA580C", "BZ=F"),
    # Real estate
    _m("realestate", "Home Builders", _RE, "Home Construction ETF (ITB)", "#EC4899", "ITB"),
    _m("reits", "REITs", _RE, "Real Estate ETF (VNQ)", "#DB2777", "VNQ"),
    # Currencies
    _m("dxy", "US Dollar", _FX, "Dollar Index (DXY)", "#22C55E", "DX-Y.NYB"),
    _m("eur", "Euro", _FX, "EUR/USD", "#3B82F6", "EURUSD=X"),
    _m("jpy", "Yen", _FX, "USD/JPY", "#EF4444", "JPY=X"),
    _m("cny", "Yuan", _FX, "USD/CNY", "#FBBF24", "CNY=X"),
    # Crypto
    _m("btc", "Bitcoin", _CR, "BTC/USD", "#F7931A", "BTC-USD"),
    _m("eth", "Ethereum", _CR, "ETH/USD", "#627EEA", "ETH-USD"),
    _m("crypto_index", "Crypto Index", _CR, "Bitwise Crypto ETF (BITQ)", "#8B5CF6", "BITQ"),
)

CATEGORIES: dict[MarketCategory, CategoryInfo] = {
    MarketCategory.EQUITIES: CategoryInfo(label="Equities", color="#6366F1", order=1),
    MarketCategory.BONDS: CategoryInfo(label="Fixed Income", color="#06B6D4", order=2),
    MarketCategory.COMMODITIES: CategoryInfo(label="Commodities", color="#F59E0B", order=3),
    MarketCategory.ENERGY: CategoryInfo(label="Energy", color="#F97316", order=4),
    MarketCategory.REAL_ESTATE: CategoryInfo(label="Real Estate", color="#EC4899", order=5),
    MarketCategory.FOREX: CategoryInfo(label="Currencies", color="#22C55E", order=6),
    MarketCategory.CRYPTO: CategoryInfo(label="Crypto", color="#F7931A", order=7),
    # No default market uses it; available to configured registries
    MarketCategory.SECTORS: CategoryInfo(label="Sectors", color="#818CF8", order=8),
}


def markets_by_source(
    registry: list[Instrument] | tuple[Instrument, ...], source: SourceTag
) -> list[Instrument]:
    """Instruments served by one provider, in registry order."""
    return [m for m in registry if m.source == source]


def group_by_source(
    registry: list[Instrument] | tuple[Instrument, ...],
) -> dict[SourceTag, list[Instrument]]:
    """Split the registry into one group per provider (empty groups omitted)."""
    groups: dict[SourceTag, list[Instrument]] = {}
    for market in registry:
        groups.setdefault(market.source, []).append(market)
    return groups


def get_market(
    registry: list[Instrument] | tuple[Instrument, ...], market_id: MarketId
) -> Instrument | None:
    for market in registry:
        if market.id == market_id:
            return market
    return None


def sorted_categories() -> list[tuple[MarketCategory, CategoryInfo]]:
    return sorted(CATEGORIES.items(), key=lambda item: item[1].order)
