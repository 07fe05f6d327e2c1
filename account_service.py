import datetime
import logging
from dataclasses import replace
from typing import Optional

from challenge_service import ChallengeService
from db import (
    ChallengeRepository,
    KeyValueStore,
    MealRepository,
    SessionRepository,
    UserRepository,
    WorkoutRepository,
)
from models import User, UserProfile, generate_id
from nutrition_service import NutritionService
from workout_service import WorkoutService

logger = logging.getLogger(__name__)


class RegistrationError(ValueError):
    pass


class AuthenticationError(ValueError):
    pass


class NotAuthenticatedError(RuntimeError):
    pass


class CredentialVerifier:
    """Turns passwords into their stored form and checks them."""

    def prepare(self, password: str) -> str:
        raise NotImplementedError

    def verify(self, stored: Optional[str], supplied: str) -> bool:
        raise NotImplementedError


class PlaintextCredentialVerifier(CredentialVerifier):
    """Stores passwords as typed and compares them verbatim.

    Local single-device use only; swap in a hashing verifier for anything
    else.
    """

    def prepare(self, password: str) -> str:
        return password

    def verify(self, stored: Optional[str], supplied: str) -> bool:
        return stored is not None and stored == supplied


class Session:
    """Signed-in user together with services bound to that user's storage keys."""

    def __init__(self, store: KeyValueStore, user: User) -> None:
        self.store = store
        self.user = user
        self.workouts = WorkoutService(WorkoutRepository(store, user.id))
        self.nutrition = NutritionService(MealRepository(store, user.id))
        self.challenges = ChallengeService(ChallengeRepository(store, user.id))


class AccountService:
    """Register, sign in and sign out local users."""

    def __init__(
        self,
        store: KeyValueStore,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        self.store = store
        self.users = UserRepository(store)
        self.sessions = SessionRepository(store)
        self.verifier = verifier or PlaintextCredentialVerifier()
        self.session: Optional[Session] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def current_user(self) -> Optional[User]:
        return self.session.user if self.session else None

    def require_session(self) -> Session:
        if self.session is None:
            raise NotAuthenticatedError("not logged in")
        return self.session

    def _start(self, user: User, now: Optional[datetime.datetime]) -> Session:
        self.session = Session(self.store, user)
        self.sessions.save(user.id, (now or datetime.datetime.now()).isoformat())
        return self.session

    def register(
        self,
        username: str,
        password: str,
        name: str,
        now: Optional[datetime.datetime] = None,
    ) -> User:
        if self.users.find_by_username(username) is not None:
            raise RegistrationError("Username already exists")
        if not username or not password or not name:
            raise RegistrationError("Please fill in all fields")
        user = User(
            id=generate_id(),
            username=username,
            name=name,
            password=self.verifier.prepare(password),
            profile=UserProfile(),
        )
        self.users.add(user)
        self._start(user, now)
        logger.info("Registered user %s", username)
        return user

    def login(
        self,
        username: str,
        password: str,
        now: Optional[datetime.datetime] = None,
    ) -> User:
        for user in self.users.fetch_all():
            if user.username == username and self.verifier.verify(user.password, password):
                self._start(user, now)
                logger.info("User %s logged in", username)
                return user
        raise AuthenticationError("Invalid credentials")

    def logout(self) -> None:
        if self.session is not None:
            logger.info("User %s logged out", self.session.user.username)
        self.session = None
        self.sessions.clear()

    def restore(self) -> Optional[User]:
        """Resume the persisted session, if its user still exists."""
        user_id = self.sessions.load()
        if user_id is None:
            return None
        user = self.users.find(user_id)
        if user is None:
            logger.warning("Session refers to unknown user %s", user_id)
            self.sessions.clear()
            return None
        self.session = Session(self.store, user)
        return user

    def update_profile(self, profile: UserProfile) -> User:
        session = self.require_session()
        updated = replace(session.user, profile=profile)
        self.users.update(updated)
        session.user = updated
        return updated
