"""Source-to-response mapping tables, one per stored document type."""

from __future__ import annotations

from mbsdesk.normalize.fields import FieldRule, as_decimal, as_text, as_timestamp, rule

MARKET_COLLECTION = "market_data"
MBS_PRODUCTS_DOC = "mbs_products"
SHADOW_BONDS_DOC = "shadow_bonds"
US10Y_DOC = "us10y_current"
US30Y_DOC = "us30y_current"

LEGACY_MBS_COLLECTION = "mbs_data"
LEGACY_TREASURY_COLLECTION = "bonds_for_umbs"
LEGACY_DOC = "market_data"

FRED_COLLECTION = "fred_reports"
USERS_COLLECTION = "users"

MBS_PREFIXES = ("UMBS_5_5", "UMBS_6_0", "GNMA_5_5", "GNMA_6_0")
SHADOW_PREFIXES = tuple(f"{prefix}_Shadow" for prefix in MBS_PREFIXES)
TREASURY_PREFIXES = ("US10Y", "US30Y")

# Response key -> document id.
RATE_DOCUMENTS = {
    "fixed30Y": "30Y Fixed Rate Conforming",
    "va30Y": "30Y VA Mortgage Index",
    "fha30Y": "30Y FHA Mortgage Index",
    "jumbo30Y": "30Y Jumbo Mortgage Index",
    "usda30Y": "30Y USDA Mortgage Index",
    "fixed15Y": "15Y Mortgage Avg US",
}

INDICATOR_DOCUMENTS = (
    "Total Housing Starts",
    "Single-Family Permits",
    "Single-Family Housing Starts",
    "Retail Sales (Excl. Food)",
    "Consumer Sentiment",
    "Case-Shiller US HPI",
    "Building Permits",
    "10Y Breakeven Inflation Rate",
    "10Y Treasury Minus 2Y Treasury",
)

RATE_PLACES = 3
INDICATOR_CHANGE_PLACES = 2
EQUITY_PLACES = 2


def price_rules(prefix: str) -> list[FieldRule]:
    """Core price fields for one instrument, with the alternate spellings the scrapers have used."""
    return [
        rule("current", f"{prefix}_Current", f"{prefix}_current", coerce=as_text),
        rule("change", f"{prefix}_Daily_Change", f"{prefix}_change", coerce=as_text),
        rule("open", f"{prefix}_Open", f"{prefix}_open", coerce=as_text),
        rule("high", f"{prefix}_TodayHigh", f"{prefix}_High", coerce=as_text),
        rule("low", f"{prefix}_TodayLow", f"{prefix}_Low", coerce=as_text),
        rule("prevClose", f"{prefix}_PriorDayClose", f"{prefix}_prevClose", coerce=as_text),
    ]


def instrument_rules(prefix: str) -> list[FieldRule]:
    return [*price_rules(prefix), rule("last_updated", "last_updated", coerce=as_timestamp)]


def bond_rules(prefix: str) -> list[FieldRule]:
    return [
        *price_rules(prefix),
        rule("close", f"{prefix}_Close", coerce=as_text),
        rule("geminiChange", f"{prefix}_Gemini_Change", coerce=as_text),
        rule("status", f"{prefix}_Status", coerce=as_text),
    ]


def treasury_rules(prefix: str) -> list[FieldRule]:
    return [
        rule("yield", f"{prefix}_Current", coerce=as_text),
        rule("change", f"{prefix}_Daily_Change", coerce=as_text),
        rule("last_updated", "last_updated", coerce=as_timestamp),
    ]


def legacy_mbs_rules() -> list[FieldRule]:
    rules: list[FieldRule] = []
    for prefix in MBS_PREFIXES:
        for suffix in ("Current", "Daily_Change", "Open"):
            rules.append(rule(f"{prefix}_{suffix}", coerce=as_text))
    rules.append(rule("last_updated", "timestamp", coerce=as_timestamp))
    return rules


def legacy_treasury_rules(prefix: str) -> list[FieldRule]:
    return [
        rule(f"{prefix}_Current", prefix, coerce=as_text),
        # Always null on the legacy endpoints, whatever the document holds.
        FieldRule(target=f"{prefix}_Daily_Change", sources=()),
        rule("last_updated", "timestamp", coerce=as_timestamp),
    ]


RATE_RULES = [
    rule("latest", coerce=as_decimal(RATE_PLACES)),
    rule("latest_date", coerce=as_text),
    rule("yesterday", coerce=as_decimal(RATE_PLACES)),
    rule("yesterday_date", coerce=as_text),
    rule("last_month", coerce=as_decimal(RATE_PLACES)),
    rule("last_month_date", coerce=as_text),
    rule("year_ago", coerce=as_decimal(RATE_PLACES)),
    rule("year_ago_date", coerce=as_text),
]

INDICATOR_RULES = [
    rule("latest", coerce=as_text),
    rule("latest_date", coerce=as_text),
    rule("last_month", coerce=as_text),
    rule("last_month_date", coerce=as_text),
    rule("year_ago", coerce=as_text),
    rule("year_ago_date", coerce=as_text),
]
