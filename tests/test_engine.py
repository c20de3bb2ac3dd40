"""Tests for the sync engine loop."""

import asyncio

import pytest

from conftest import FakeSonosClient, device_error
from sinuous.channel import Channel
from sinuous.engine import EngineState, SyncEngine
from sinuous.errors import NoDevicesFound, TopologyQueryFailed
from sinuous.models import (
    NavigateFavorites,
    Direction,
    NewState,
    NextGroup,
    NopUpdate,
    Pause,
    Play,
    SwitchView,
    ViewMode,
    VolumeAdjust,
)


def make_engine(client, capacity=8, interval=3600):
    commands = Channel(capacity)
    updates = Channel(capacity)
    engine = SyncEngine(client, commands, updates, refresh_interval=interval, discovery_timeout=0.1)
    return engine, commands, updates


def drain_updates(updates):
    received = []
    while True:
        update = updates.try_recv()
        if update is None:
            return received
        received.append(update)


class TestInitialize:
    """Startup resolves speakers, groups, favorites and the first state."""

    @pytest.mark.asyncio
    async def test_initialize_publishes_first_state(self):
        client = FakeSonosClient()
        engine, _, updates = make_engine(client)

        await engine.initialize()

        assert engine.state is EngineState.RUNNING
        assert client.calls_named('discover') != []
        # Topology and favorites both come from the first speaker by identifier
        assert client.calls_named('group_topology') == [('group_topology', 'RINCON_A')]
        assert client.calls_named('browse') == [('browse', 'RINCON_A', 'FV:2')]

        (update,) = drain_updates(updates)
        assert isinstance(update, NewState)
        state = update.state
        assert state.group_names == ('Living Room + Kitchen', 'Office')
        assert state.group_name == 'Living Room + Kitchen'
        assert state.current_volume == 10
        assert len(state.queue) == 2
        assert [f.title for f in state.favorites] == ['Morning Mix']

    @pytest.mark.asyncio
    async def test_favorites_failure_is_not_fatal(self):
        client = FakeSonosClient()
        client.failures['browse'] = device_error()
        engine, _, updates = make_engine(client)

        await engine.initialize()

        assert engine.favorites == []
        (update,) = drain_updates(updates)
        assert update.state.favorites == ()

    @pytest.mark.asyncio
    async def test_initial_refresh_failure_is_not_fatal(self):
        client = FakeSonosClient()
        client.failures['volume'] = device_error()
        engine, _, updates = make_engine(client)

        await engine.initialize()

        assert engine.state is EngineState.RUNNING
        (update,) = drain_updates(updates)
        assert update.state.current_volume == 0
        assert update.state.queue == ()

    @pytest.mark.asyncio
    async def test_no_devices_aborts_startup(self):
        engine, _, _ = make_engine(FakeSonosClient(speakers=()))
        with pytest.raises(NoDevicesFound):
            await engine.run()
        assert engine.state is EngineState.TERMINATED

    @pytest.mark.asyncio
    async def test_topology_failure_aborts_startup(self):
        client = FakeSonosClient()
        client.failures['group_topology'] = device_error()
        engine, _, _ = make_engine(client)
        with pytest.raises(TopologyQueryFailed):
            await engine.run()


class TestRefresh:
    """Polling keeps the last good state on failure."""

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_snapshot(self):
        client = FakeSonosClient()
        engine, _, updates = make_engine(client)
        await engine.initialize()
        before = engine.playback
        drain_updates(updates)

        # is_playing and volume answer with new values, then queue fails
        client.playing = True
        client.volume_level = 55
        client.failures['queue'] = device_error()
        await engine.on_tick()

        assert engine.playback is before
        assert engine.playback.is_playing is False
        assert engine.playback.current_volume == 10
        assert engine.snapshot().current_volume == 10
        # The presenter keeps drawing the state it already has
        assert drain_updates(updates) == [NopUpdate()]

    @pytest.mark.asyncio
    async def test_tick_refreshes_selected_coordinator(self):
        client = FakeSonosClient()
        engine, _, updates = make_engine(client)
        await engine.initialize()
        engine.groups.select_next()
        client.calls.clear()

        await engine.on_tick()

        assert set(call[1] for call in client.calls) == {'RINCON_C'}
        assert len(drain_updates(updates)) == 2


class TestCommands:
    """Queued commands are coalesced into one refresh and one update."""

    @pytest.mark.asyncio
    async def test_toggle_burst_refreshes_once(self):
        client = FakeSonosClient()
        engine, commands, updates = make_engine(client)
        await engine.initialize()
        drain_updates(updates)
        client.calls.clear()

        for command in (Play(), Pause(), Play(), Pause(), Play()):
            await commands.send(command)
        commands.close()
        await engine.run_loop()

        assert len(client.calls_named('play')) == 3
        assert len(client.calls_named('pause')) == 2
        assert len(client.calls_named('is_playing')) <= 1
        assert len(client.calls_named('queue')) <= 1
        assert len(drain_updates(updates)) == 1
        assert engine.state is EngineState.TERMINATED

    @pytest.mark.asyncio
    async def test_local_commands_do_not_refresh(self):
        client = FakeSonosClient()
        engine, commands, updates = make_engine(client)
        await engine.initialize()
        drain_updates(updates)
        client.calls.clear()

        await commands.send(SwitchView(ViewMode.FAVORITES))
        await commands.send(NavigateFavorites(Direction.DOWN))
        await commands.send(NextGroup())
        commands.close()
        await engine.run_loop()

        assert client.calls == []
        (update,) = drain_updates(updates)
        assert update.state.current_view is ViewMode.FAVORITES
        assert update.state.selected_group == 1
        assert update.state.selected_favorite == 0

    @pytest.mark.asyncio
    async def test_failed_command_does_not_stop_the_batch(self):
        client = FakeSonosClient()
        engine, commands, updates = make_engine(client)
        await engine.initialize()
        drain_updates(updates)
        client.failures['play'] = device_error()
        client.calls.clear()

        await commands.send(Play())
        await commands.send(VolumeAdjust(2))
        commands.close()
        await engine.run_loop()

        assert client.calls_named('set_volume_relative') == [('set_volume_relative', 'RINCON_B', 2)]
        assert len(client.calls_named('is_playing')) == 1
        (update,) = drain_updates(updates)
        assert update.state.current_volume == 12


class TestLoop:
    """The loop runs on its timer until the command channel closes."""

    @pytest.mark.asyncio
    async def test_ticks_until_channel_closes(self):
        client = FakeSonosClient()
        engine, commands, updates = make_engine(client, capacity=2, interval=0.01)
        task = asyncio.create_task(engine.run())

        for _ in range(3):
            update = await asyncio.wait_for(updates.recv(), 1)
            assert isinstance(update, NewState)

        async def consume():
            while True:
                await updates.recv()

        consumer = asyncio.create_task(consume())
        commands.close()
        await asyncio.wait_for(task, 1)
        consumer.cancel()

        assert engine.state is EngineState.TERMINATED
        assert len(client.calls_named('is_playing')) >= 3

    @pytest.mark.asyncio
    async def test_closed_channel_is_a_clean_exit(self):
        engine, commands, _ = make_engine(FakeSonosClient())
        commands.close()
        await asyncio.wait_for(engine.run(), 1)
        assert engine.state is EngineState.TERMINATED

    @pytest.mark.asyncio
    async def test_slow_poll_is_followed_by_a_full_interval(self):
        """A tick that outlasts the interval does not trigger the next one immediately."""
        interval = 0.05
        client = SlowPollClient(delay=0.1)
        engine, commands, updates = make_engine(client, capacity=2, interval=interval)
        task = asyncio.create_task(engine.run())

        async def consume():
            while True:
                await updates.recv()

        consumer = asyncio.create_task(consume())

        async def wait_for_polls(count):
            while len(client.polls) < count:
                await asyncio.sleep(0.01)

        # The first poll belongs to initialization, the rest to ticks
        await asyncio.wait_for(wait_for_polls(4), 5)
        commands.close()
        await asyncio.wait_for(task, 2)
        consumer.cancel()

        ticks = client.polls[1:]
        for (_, finished), (started, _) in zip(ticks, ticks[1:]):
            assert started - finished >= interval / 2


class SlowPollClient(FakeSonosClient):
    """Takes ``delay`` seconds to answer every state poll."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay
        self.polls = []

    async def is_playing(self, speaker):
        loop = asyncio.get_running_loop()
        started = loop.time()
        await asyncio.sleep(self.delay)
        self.polls.append((started, loop.time()))
        return await super().is_playing(speaker)
