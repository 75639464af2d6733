"""
Database models package
"""

from .guest_list import GuestListEntry
from .participant import Participant
from .response import Response, ResponseToken
from .food_entry import FoodEntry
from .setting import SettingEntry
from .access_log import PageVisit, LoginAttempt

__all__ = [
    "GuestListEntry",
    "Participant",
    "Response",
    "ResponseToken",
    "FoodEntry",
    "SettingEntry",
    "PageVisit",
    "LoginAttempt",
]
