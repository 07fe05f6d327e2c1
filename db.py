import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from models import Challenge, Meal, User, Workout

logger = logging.getLogger(__name__)

KEY_PREFIX = "fitgenius"
USERS_KEY = f"{KEY_PREFIX}_users"
SESSION_KEY = f"{KEY_PREFIX}_session"


def user_key(user_id: str, collection: str) -> str:
    """Return the storage key of ``collection`` owned by ``user_id``."""
    return f"{KEY_PREFIX}_{user_id}_{collection}"


class Database:
    """SQLite file holding the key-value table."""

    _SCHEMA = (
        "CREATE TABLE IF NOT EXISTS kv_store ("
        "key TEXT PRIMARY KEY, "
        "value TEXT NOT NULL);"
    )

    def __init__(self, db_path: str = "fitgenius.db") -> None:
        self._db_path = db_path
        with self._connection() as conn:
            conn.execute(self._SCHEMA)

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connection(self):
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


class BaseRepository(Database):
    def execute(self, query: str, params: Tuple = ()) -> None:
        with self._connection() as conn:
            conn.execute(query, params)

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            return conn.execute(query, params).fetchall()


class KeyValueStore(BaseRepository):
    """Durable JSON values addressed by string keys.

    Missing keys and unreadable values both resolve to the caller's default.
    Read failures are logged and never raised.
    """

    def get(self, key: str, default: Any = None) -> Any:
        try:
            rows = self.fetch_all("SELECT value FROM kv_store WHERE key = ?;", (key,))
        except sqlite3.Error as e:
            logger.warning("Could not read key %s: %s", key, e)
            return default
        if not rows:
            return default
        try:
            return json.loads(rows[0][0])
        except (TypeError, ValueError) as e:
            logger.warning("Discarding malformed JSON stored under %s: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> None:
        self.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, json.dumps(value)),
        )

    def delete(self, key: str) -> None:
        self.execute("DELETE FROM kv_store WHERE key = ?;", (key,))

    def keys(self, prefix: str = "") -> List[str]:
        rows = self.fetch_all(
            "SELECT key FROM kv_store WHERE key LIKE ? ORDER BY key;",
            (f"{prefix}%",),
        )
        return [r[0] for r in rows]


T = TypeVar("T")


class JsonListRepository(Generic[T]):
    """Whole-collection access to a JSON array of entities under one key."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        loader: Callable[[dict], T],
    ) -> None:
        self.store = store
        self.key = key
        self._loader = loader

    def fetch_all(self) -> List[T]:
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            logger.warning("Expected a list under %s, got %s", self.key, type(raw).__name__)
            return []
        items: List[T] = []
        for entry in raw:
            try:
                items.append(self._loader(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable entry under %s: %s", self.key, e)
        return items

    def replace_all(self, items: List[T]) -> None:
        self.store.set(self.key, [item.to_dict() for item in items])

    def add(self, item: T) -> T:
        items = self.fetch_all()
        items.append(item)
        self.replace_all(items)
        return item

    def find(self, item_id: str) -> Optional[T]:
        for item in self.fetch_all():
            if item.id == item_id:
                return item
        return None

    def delete(self, item_id: str) -> bool:
        items = self.fetch_all()
        kept = [i for i in items if i.id != item_id]
        if len(kept) == len(items):
            return False
        self.replace_all(kept)
        return True

    def delete_all(self) -> None:
        self.store.delete(self.key)


class WorkoutRepository(JsonListRepository[Workout]):
    """Workouts of a single user in the order they were recorded."""

    def __init__(self, store: KeyValueStore, user_id: str) -> None:
        super().__init__(store, user_key(user_id, "workouts"), Workout.from_dict)


class MealRepository(JsonListRepository[Meal]):
    """Meals of a single user."""

    def __init__(self, store: KeyValueStore, user_id: str) -> None:
        super().__init__(store, user_key(user_id, "meals"), Meal.from_dict)


class ChallengeRepository(JsonListRepository[Challenge]):
    """Challenges of a single user."""

    def __init__(self, store: KeyValueStore, user_id: str) -> None:
        super().__init__(store, user_key(user_id, "challenges"), Challenge.from_dict)


class UserRepository(JsonListRepository[User]):
    """Registered users shared by every account on this storage."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, USERS_KEY, User.from_dict)

    def find_by_username(self, username: str) -> Optional[User]:
        for user in self.fetch_all():
            if user.username == username:
                return user
        return None

    def update(self, user: User) -> None:
        users = self.fetch_all()
        if not any(u.id == user.id for u in users):
            raise ValueError("user not found")
        self.replace_all([user if u.id == user.id else u for u in users])


class SessionRepository:
    """Persisted record of the currently signed-in user."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> Optional[str]:
        data = self.store.get(SESSION_KEY)
        if not isinstance(data, dict):
            return None
        user_id = data.get("userId")
        return str(user_id) if user_id else None

    def save(self, user_id: str, timestamp: str) -> None:
        self.store.set(SESSION_KEY, {"userId": user_id, "loggedInAt": timestamp})

    def clear(self) -> None:
        self.store.delete(SESSION_KEY)
