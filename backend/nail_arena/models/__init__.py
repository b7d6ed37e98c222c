"""Pydantic models for persisted records."""

from .combat import CombatHistoryRecord
from .nail import NailDefinition, OwnedNail, OwnedNailView, Rarity
from .profile import BALANCE_FIELDS, Currency, DreamPointDeduction, Profile
from .story import ChoiceAction, Location, LocationChoice, StoryProgress
from .trade import AdminLink, AdminLinkClaim, TradeLink

__all__ = [
    "AdminLink",
    "AdminLinkClaim",
    "BALANCE_FIELDS",
    "ChoiceAction",
    "CombatHistoryRecord",
    "Currency",
    "DreamPointDeduction",
    "Location",
    "LocationChoice",
    "NailDefinition",
    "OwnedNail",
    "OwnedNailView",
    "Profile",
    "Rarity",
    "StoryProgress",
    "TradeLink",
]
