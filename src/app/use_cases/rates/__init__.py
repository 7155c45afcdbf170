"""Rate domain use cases"""
from .rate_engine import RateEngine, RateBand, RateSnapshot
from .manage_rate_cards import CreateRateCard, UpdateRateCard, DeactivateRateCard, ListRateCards
from .manage_settings import GetSettings, UpdateSettings
from .lookup_rate import LookupRate
from .dtos import (
    CreateRateCardCommandDTO,
    UpdateRateCardCommandDTO,
    RateCardDTO,
    ListRateCardsResponseDTO,
    RateQuoteCommandDTO,
    RateQuoteResponseDTO,
    SettingsResponseDTO,
    UpdateSettingsCommandDTO,
)

__all__ = [
    "RateEngine",
    "RateBand",
    "RateSnapshot",
    "CreateRateCard",
    "UpdateRateCard",
    "DeactivateRateCard",
    "ListRateCards",
    "GetSettings",
    "UpdateSettings",
    "LookupRate",
    "CreateRateCardCommandDTO",
    "UpdateRateCardCommandDTO",
    "RateCardDTO",
    "ListRateCardsResponseDTO",
    "RateQuoteCommandDTO",
    "RateQuoteResponseDTO",
    "SettingsResponseDTO",
    "UpdateSettingsCommandDTO",
]
