"""Tests for the DataFlow context object and the module level API."""

import pytest

import dataflow
from dataflow import (
    ActionStatus,
    ChannelClosedError,
    DataAction,
    DataFlow,
    DataFlowConfig,
    DataMiddleware,
    DataStore,
    NotInitializedError,
    data_flow_context,
    get_data_flow,
)


class CounterStore(DataStore):
    def __init__(self) -> None:
        super().__init__()
        self.count = 0


class OtherStore(DataStore):
    pass


class Increment(DataAction[CounterStore]):
    def execute(self) -> None:
        self.store.count += 1


class ActionRejector(DataMiddleware):
    """Rejects every Increment."""

    def __init__(self) -> None:
        self.rejected = 0

    def pre_action(self, action: DataAction) -> bool:
        if isinstance(action, Increment):
            self.rejected += 1
            return False
        return True

    def post_action(self, action: DataAction) -> None:
        pass


class ActionCounter(DataMiddleware):
    """Counts the actions that finished."""

    def __init__(self) -> None:
        self.finished = 0

    def pre_action(self, action: DataAction) -> bool:
        return True

    def post_action(self, action: DataAction) -> None:
        self.finished += 1


def test_get_store_before_init() -> None:
    """Test the store cannot be read before the flow is initialized."""
    flow = DataFlow()
    assert not flow.initialized
    with pytest.raises(NotInitializedError, match="Call init"):
        flow.get_store()


def test_get_store_type() -> None:
    """Test reading the store with an expected type."""
    store = CounterStore()
    flow = DataFlow(store)
    assert flow.initialized
    assert flow.get_store(CounterStore) is store
    assert flow.store is store
    with pytest.raises(
        ValueError, match=r"Store is not of type OtherStore \(was CounterStore\)"
    ):
        flow.get_store(OtherStore)


def test_interceptor_execution() -> None:
    """Test a middleware given at initialization observes actions."""
    counter = ActionCounter()
    flow = DataFlow()
    flow.init(CounterStore(), middlewares=[counter])
    assert counter.finished == 0
    with data_flow_context(flow):
        Increment()
    assert counter.finished == 1


def test_interceptor_rejection() -> None:
    """Test a rejected action leaves no trace."""
    rejector = ActionRejector()
    counter = ActionCounter()
    store = CounterStore()
    flow = DataFlow(store, middlewares=[rejector, counter])
    published: list[DataAction] = []
    flow.listen(published.append)

    with data_flow_context(flow):
        action = Increment()

    assert rejector.rejected == 1
    assert store.count == 0
    assert action.status == ActionStatus.IDLE
    assert store.get_status(Increment) == ActionStatus.IDLE
    assert published == []
    # Post hooks only run for admitted actions
    assert counter.finished == 0


def test_add_middleware_not_retroactive() -> None:
    """Test a middleware added later only sees later actions."""
    store = CounterStore()
    flow = DataFlow(store)
    with data_flow_context(flow):
        Increment()
        flow.add_middleware(ActionRejector())
        Increment()
    assert store.count == 1
    assert len(flow.middleware) == 1


def test_reinit_replaces_store_and_middleware() -> None:
    """Test a second init replaces both the store and the middleware."""
    rejector = ActionRejector()
    flow = DataFlow(CounterStore(), middlewares=[rejector])
    published: list[DataAction] = []
    flow.listen(published.append)

    new_store = CounterStore()
    flow.init(new_store)
    with data_flow_context(flow):
        Increment()

    assert rejector.rejected == 0
    assert new_store.count == 1
    assert len(flow.middleware) == 0
    # Subscriptions survive a re-initialization
    assert len(published) == 1


def test_dispose() -> None:
    """Test publishing after dispose fails and init reopens the bus."""
    store = CounterStore()
    flow = DataFlow(store)
    events = flow.events
    flow.dispose()

    assert events.closed
    with data_flow_context(flow):
        with pytest.raises(ChannelClosedError):
            Increment()
    # Nothing ran, so nothing was committed
    assert store.get_status(Increment) == ActionStatus.IDLE
    assert store.count == 0

    flow.init(store)
    published: list[DataAction] = []
    flow.listen(published.append)
    with data_flow_context(flow):
        Increment()
    assert len(published) == 1


def test_context_creates_flow() -> None:
    """Test a flow is created on demand and scoped to the context."""
    with data_flow_context() as flow:
        assert get_data_flow() is flow
        with data_flow_context() as inner:
            assert get_data_flow() is inner
            assert inner is not flow
        assert get_data_flow() is flow


def test_module_level_api() -> None:
    """Test initializing and using the current flow through the module functions."""
    with data_flow_context() as flow:
        store = CounterStore()
        counter = ActionCounter()
        config = DataFlowConfig(default_error_message="Oops")
        assert dataflow.init(store, config=config) is flow
        assert flow.config.default_error_message == "Oops"
        assert dataflow.get_store(CounterStore) is store

        dataflow.add_middleware(counter)
        events = dataflow.events()
        increments = dataflow.events_of(Increment)
        action = Increment()

        assert counter.finished == 1
        assert [e.action for e in events.drain()] == [action]
        assert [e.status for e in increments.drain()] == [ActionStatus.SUCCESS]

        dataflow.dispose()
        assert flow.bus.closed
        assert events.closed


def test_module_level_store_before_init() -> None:
    """Test the current flow reports a missing store."""
    with data_flow_context():
        with pytest.raises(NotInitializedError):
            dataflow.get_store()


class Broken(DataMiddleware):
    def pre_action(self, action: DataAction) -> bool:
        raise RuntimeError("broken middleware")

    def post_action(self, action: DataAction) -> None:
        pass


def test_middleware_fault_escapes_constructor() -> None:
    """Test a broken middleware is reported to the caller constructing the action."""
    store = CounterStore()
    flow = DataFlow(store, middlewares=[Broken()])
    with data_flow_context(flow):
        with pytest.raises(RuntimeError, match="broken middleware"):
            Increment()
    assert store.count == 0
