"""
Fixed enumerations shared by catalog, profiles and interactions
"""
from enum import Enum


class SkinType(str, Enum):
    """Skin types, in feature-vector order"""
    OILY = "oily"
    DRY = "dry"
    COMBINATION = "combination"
    NORMAL = "normal"
    SENSITIVE = "sensitive"


class SkinConcern(str, Enum):
    """Skin concerns, in feature-vector order"""
    ACNE = "acne"
    AGING = "aging"
    DRYNESS = "dryness"
    SENSITIVITY = "sensitivity"
    HYPERPIGMENTATION = "hyperpigmentation"
    REDNESS = "redness"


class InteractionType(str, Enum):
    """Kinds of user interaction events"""
    VIEW = "view"
    CLICK = "click"
    PURCHASE = "purchase"
    FAVORITE = "favorite"
    REVIEW = "review"
    SEARCH = "search"
