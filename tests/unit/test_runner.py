"""Tests for the reconciler Runner."""

from __future__ import annotations

from conftest import FakeStore, TickingClock, store_key

from power_monitor_operator.builders.power_monitor import CONFIG_MAP_GVK
from power_monitor_operator.constants import FINALIZER
from power_monitor_operator.models import ResourceHandle
from power_monitor_operator.reconciler import Action, Deleter, Finalizer, Reconciler, Result, Runner
from power_monitor_operator.utils.context import ReconcileContext
from power_monitor_operator.utils.errors import ReconcileCancelled, StoreError


class StubReconciler(Reconciler):
    """Reconciler returning a fixed outcome and recording its invocation."""

    name = "stub"

    def __init__(self, label: str, outcome: Result, invoked: list[str]):
        super().__init__()
        self.label = label
        self.outcome = outcome
        self.invoked = invoked

    @property
    def resource(self) -> ResourceHandle:
        return ResourceHandle(gvk=CONFIG_MAP_GVK, name=self.label, namespace="ns")

    def _reconcile(self, store, ctx) -> Result:
        self.invoked.append(self.label)
        return self.outcome


def stubs(outcomes: list[Result], invoked: list[str]) -> list[Reconciler]:
    return [StubReconciler(f"r{i}", outcome, invoked) for i, outcome in enumerate(outcomes, start=1)]


class TestRunner:
    """Test cases for Runner.run."""

    def test_all_converged(self, store: FakeStore, ctx):
        """Test that a fully converged pass reports success."""
        invoked: list[str] = []

        run = Runner(store).run(stubs([Result.converged()] * 3, invoked), ctx)

        assert run.succeeded
        assert run.requeue_after is None
        assert invoked == ["r1", "r2", "r3"]
        assert len(run.completed) == 3

    def test_empty_list_succeeds(self, store: FakeStore, ctx):
        """Test that an empty list is a successful no-op."""
        run = Runner(store).run([], ctx)

        assert run.succeeded

    def test_halts_on_first_error(self, store: FakeStore, ctx):
        """Test that the pass stops at the failing reconciler and reports its error."""
        invoked: list[str] = []
        error = StoreError("boom")
        outcomes = [Result.converged(), Result.failed(error)] + [Result.converged()] * 3

        run = Runner(store).run(stubs(outcomes, invoked), ctx)

        assert invoked == ["r1", "r2"]
        assert run.error is error
        assert run.requeue_after is None
        assert not run.succeeded

    def test_requeue_sets_delay(self, store: FakeStore, ctx):
        """Test that a requeue halts the pass and sets the configured delay."""
        invoked: list[str] = []
        outcomes = [Result.requeue("waiting"), Result.converged()]

        run = Runner(store, requeue_after=7.5).run(stubs(outcomes, invoked), ctx)

        assert invoked == ["r1"]
        assert run.requeue_after == 7.5
        assert run.error is None

    def test_requeue_with_error_keeps_both(self, store: FakeStore, ctx):
        """Test that an error converted to a requeue keeps the error."""
        invoked: list[str] = []
        error = StoreError("conflict")
        outcome = Result(action=Action.REQUEUE, error=error, reason="conflict")

        run = Runner(store, requeue_after=5.0).run(stubs([outcome], invoked), ctx)

        assert run.requeue_after == 5.0
        assert run.error is error

    def test_cancelled_context_runs_nothing(self, store: FakeStore):
        """Test that a cancelled invocation stops before the next reconciler."""
        invoked: list[str] = []
        ctx = ReconcileContext()
        ctx.cancel()

        run = Runner(store).run(stubs([Result.converged()], invoked), ctx)

        assert invoked == []
        assert isinstance(run.error, ReconcileCancelled)


class TestTeardownOrdering:
    """Test cases for ordered teardown through real reconcilers."""

    def test_deleters_then_finalizer(self, store: FakeStore, owner):
        """Test that the finalizer runs only after the waited deleter finishes."""
        ctx = ReconcileContext(clock=TickingClock(step=0.1))
        store.lookup(owner)["metadata"]["finalizers"] = [FINALIZER]
        ns = store.add({"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "a"}})
        cm = store.add(
            {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "b", "namespace": "a"}}
        )
        store.linger_on_delete[store_key(ns)] = 1
        store.mark_deleted(owner)

        reconcilers = [
            Deleter(ns, wait_timeout=30.0, poll_interval=0.0),
            Deleter(cm),
            Finalizer(owner, FINALIZER),
        ]
        run = Runner(store).run(reconcilers, ctx)

        assert run.succeeded
        ops = [(op, kind) for op, kind, _ in store.calls]
        assert ops == [
            ("delete", "Namespace"),
            ("get", "Namespace"),
            ("get", "Namespace"),
            ("delete", "ConfigMap"),
            ("get", "PowerMonitor"),
            ("update", "PowerMonitor"),
        ]
        assert store.lookup(owner) is None

    def test_waited_deleter_timeout_keeps_marker(self, store: FakeStore, owner):
        """Test that the finalizer does not run while teardown is incomplete."""
        ctx = ReconcileContext(clock=TickingClock(step=1.0))
        store.lookup(owner)["metadata"]["finalizers"] = [FINALIZER]
        ns = store.add({"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "a"}})
        store.linger_on_delete[store_key(ns)] = None
        store.mark_deleted(owner)

        run = Runner(store).run(
            [Deleter(ns, wait_timeout=3.0, poll_interval=0.0), Finalizer(owner, FINALIZER)], ctx
        )

        assert run.error is not None
        assert store.lookup(owner)["metadata"]["finalizers"] == [FINALIZER]
