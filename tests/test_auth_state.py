import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from app.core.exceptions import ProviderAuthError
from app.modules.auth.state import AuthStateContainer


class FakeIdentity:
    def __init__(self, user=None, error=None, blocked=False):
        self.user = user
        self.error = error
        self.callback = None
        self.subscription = MagicMock()
        self.release = asyncio.Event()
        if not blocked:
            self.release.set()
        self.sign_out = AsyncMock()

    def on_auth_state_change(self, callback):
        self.callback = callback
        return self.subscription

    async def get_current_user(self):
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.user


def session_for(user):
    return SimpleNamespace(user=user)


def loading_transitions(snapshots, initially_loading=True):
    count = 0
    previous = initially_loading
    for snapshot in snapshots:
        if previous and not snapshot.is_loading:
            count += 1
        previous = snapshot.is_loading
    return count


async def test_mount_loads_current_user():
    user = SimpleNamespace(id="u-1")
    container = AuthStateContainer(FakeIdentity(user=user))
    assert container.is_loading is True

    await container.mount()

    assert container.is_loading is False
    assert container.user is user
    assert container.is_authenticated is True


async def test_fetch_failure_leaves_user_empty():
    container = AuthStateContainer(FakeIdentity(error=ProviderAuthError("network down")))

    await container.mount()

    assert container.is_loading is False
    assert container.user is None


async def test_loading_clears_once_with_early_initial_session():
    user = SimpleNamespace(id="u-1")
    identity = FakeIdentity(user=user, blocked=True)
    container = AuthStateContainer(identity)
    snapshots = []
    container.subscribe(snapshots.append)

    mounting = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    identity.callback("INITIAL_SESSION", session_for(user))
    assert container.is_loading is False

    identity.callback("TOKEN_REFRESHED", session_for(user))
    identity.release.set()
    await mounting
    identity.callback("SIGNED_IN", session_for(user))

    assert container.is_loading is False
    assert loading_transitions(snapshots) == 1


async def test_non_initial_event_does_not_clear_loading():
    user = SimpleNamespace(id="u-1")
    identity = FakeIdentity(blocked=True)
    container = AuthStateContainer(identity)

    mounting = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    identity.callback("SIGNED_IN", session_for(user))

    assert container.user is user
    assert container.is_loading is True

    identity.release.set()
    await mounting
    assert container.is_loading is False


async def test_sign_out_event_clears_user():
    user = SimpleNamespace(id="u-1")
    identity = FakeIdentity(user=user)
    container = AuthStateContainer(identity)
    await container.mount()

    identity.callback("SIGNED_OUT", None)

    assert container.user is None
    assert container.is_authenticated is False


async def test_unmount_unsubscribes_and_ignores_late_results():
    identity = FakeIdentity(user=SimpleNamespace(id="u-1"), blocked=True)
    container = AuthStateContainer(identity)

    mounting = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    container.unmount()
    identity.release.set()
    await mounting

    identity.subscription.unsubscribe.assert_called_once()
    assert container.user is None
    assert container.is_loading is True

    identity.callback("SIGNED_IN", session_for(SimpleNamespace(id="u-2")))
    assert container.user is None


async def test_context_manager_mounts_and_unmounts():
    identity = FakeIdentity(user=SimpleNamespace(id="u-1"))

    async with AuthStateContainer(identity) as container:
        assert container.is_authenticated is True

    identity.subscription.unsubscribe.assert_called_once()


async def test_sign_out_success_and_failure():
    user = SimpleNamespace(id="u-1")
    identity = FakeIdentity(user=user)
    container = AuthStateContainer(identity)
    await container.mount()

    identity.sign_out.side_effect = ProviderAuthError("session expired")
    error = await container.sign_out()
    assert isinstance(error, ProviderAuthError)
    assert container.user is user
    assert container.is_loading is False

    identity.sign_out.side_effect = None
    assert await container.sign_out() is None
    assert container.user is None
    assert container.is_loading is False


async def test_listener_unsubscribe_and_immutable_snapshots():
    identity = FakeIdentity(user=SimpleNamespace(id="u-1"))
    container = AuthStateContainer(identity)
    snapshots = []
    unsubscribe = container.subscribe(snapshots.append)

    await container.mount()
    unsubscribe()
    identity.callback("SIGNED_OUT", None)

    assert len(snapshots) == 1
    assert snapshots[0].user.id == "u-1"
    assert snapshots[0].is_loading is False
    assert container.state is not snapshots[0]


class QueuedIdentity(FakeIdentity):
    """Each get_current_user call waits on its own future"""

    def __init__(self):
        super().__init__()
        self.pending = []

    async def get_current_user(self):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


async def test_fetch_from_previous_mount_is_dropped_after_remount():
    identity = QueuedIdentity()
    container = AuthStateContainer(identity)

    first_mount = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    container.unmount()
    second_mount = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    assert len(identity.pending) == 2

    identity.pending[0].set_result(SimpleNamespace(id="from-first-mount"))
    await first_mount
    assert container.user is None
    assert container.is_loading is True

    current = SimpleNamespace(id="from-second-mount")
    identity.pending[1].set_result(current)
    await second_mount
    assert container.user is current
    assert container.is_loading is False


async def test_events_from_previous_subscription_are_dropped_after_remount():
    identity = QueuedIdentity()
    container = AuthStateContainer(identity)

    first_mount = asyncio.create_task(container.mount())
    await asyncio.sleep(0)
    stale_callback = identity.callback
    container.unmount()
    second_mount = asyncio.create_task(container.mount())
    await asyncio.sleep(0)

    stale_callback("INITIAL_SESSION", session_for(SimpleNamespace(id="stale")))
    assert container.user is None
    assert container.is_loading is True

    for future in identity.pending:
        future.set_result(None)
    await asyncio.gather(first_mount, second_mount)
    assert container.is_loading is False
