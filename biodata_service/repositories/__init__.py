"""Repository layer to abstract MongoDB access patterns."""

from .contact_request import ContactRequestRepository
from .counter import CounterRepository
from .favourite import FavouriteRepository
from .profile import ProfileRepository
from .success_story import SuccessStoryRepository
from .user import UserRepository

__all__ = [
    "ContactRequestRepository",
    "CounterRepository",
    "FavouriteRepository",
    "ProfileRepository",
    "SuccessStoryRepository",
    "UserRepository",
]
