from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import TimeSource
from ..database.paths import USERS, user_path
from ..database.tree_store import TreeStore
from .model import User
from .repository import UserRepository


class StoreUserRepository(UserRepository):
    def __init__(self, store: TreeStore, clock: Optional[TimeSource] = None):
        self._store = store
        self._clock = clock or TimeSource()

    def get_by_id(self, user_id: str) -> Optional[User]:
        raw = self._store.read(user_path(user_id))
        if not isinstance(raw, Mapping):
            return None
        return User.from_dict(user_id, raw, self._clock.tz)

    def list_all(self) -> Sequence[User]:
        raw = self._store.read(USERS) or {}
        return [
            User.from_dict(user_id, data, self._clock.tz)
            for user_id, data in sorted(raw.items())
            if isinstance(data, Mapping)
        ]
