"""
Auth state for a client session.

AuthStateContainer is the only writer of the current user and loading flag.
It is fed by the identity client's auth-change subscription and broadcasts
an immutable AuthState snapshot to its listeners on every change.
"""

import logging
from app.core.exceptions import ProviderAuthError
from app.modules.auth.identity_client import IdentityClient
from app.modules.auth.schemas import AuthState
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

INITIAL_SESSION = "INITIAL_SESSION"

Listener = Callable[[AuthState], None]


class AuthStateContainer:
    def __init__(self, identity: IdentityClient):
        self._identity = identity
        self._state = AuthState()
        self._listeners: List[Listener] = []
        self._subscription = None
        self._mounted = False
        # Bumped on every mount and unmount; work started under an older value is dropped
        self._generation = 0

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self):
        return self._state.user

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    async def __aenter__(self) -> "AuthStateContainer":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.unmount()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with each new state; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def mount(self) -> None:
        """Subscribe to auth changes and load the current user"""
        if self._mounted:
            return
        self._mounted = True
        self._generation += 1
        generation = self._generation
        self._update(is_loading=True)
        self._subscription = self._identity.on_auth_state_change(
            lambda event, session: self._handle_auth_change(event, session, generation)
        )
        await self._fetch_user(generation)

    def unmount(self) -> None:
        # In-flight requests keep running; their results are dropped
        self._mounted = False
        self._generation += 1
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def sign_out(self) -> Optional[ProviderAuthError]:
        """Sign out through the provider; returns the provider error instead of raising it"""
        self._update(is_loading=True)
        try:
            await self._identity.sign_out()
        except ProviderAuthError as e:
            logger.error(f"Error signing out: {e}")
            return e
        else:
            self._update(user=None)
            return None
        finally:
            self._update(is_loading=False)

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    async def _fetch_user(self, generation: int) -> None:
        try:
            user = await self._identity.get_current_user()
        except Exception as e:
            logger.error(f"Error fetching current user: {e}")
            user = None
        if self._is_current(generation):
            self._update(user=user, is_loading=False)

    def _handle_auth_change(self, event: str, session: Any, generation: int) -> None:
        logger.debug(f"Auth state change: {event}")
        if not self._is_current(generation):
            return
        changes = {"user": getattr(session, "user", None) if session else None}
        if event == INITIAL_SESSION and self._state.is_loading:
            changes["is_loading"] = False
        self._update(**changes)

    def _update(self, **changes) -> None:
        new_state = self._state.model_copy(update=changes)
        if (new_state.user, new_state.is_loading) == (self._state.user, self._state.is_loading):
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Auth state listener failed")
