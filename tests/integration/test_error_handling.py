"""
Error Handling & Reliability Tests

Tests for the error taxonomy, timeout containment and graceful degradation.
"""

import asyncio
import threading
import time

import pytest

from engines.shared.base_engine import EngineStatus, create_functional_engine
from engines.shared.errors import (
    CircularDependencyError,
    DependencyError,
    DuplicateEngineError,
    EngineError,
    EngineFailureError,
    EngineNotFoundError,
    EngineTimeoutError,
    InvalidConfigurationError,
    MissingDependencyError,
    MissingFieldError,
)
from orchestrator.consultation import EngineOrchestrator


class TestErrorTaxonomy:
    """Tests for the error class hierarchy"""

    @pytest.mark.parametrize("error_class", [
        InvalidConfigurationError,
        MissingFieldError,
        DuplicateEngineError,
        EngineNotFoundError,
        DependencyError,
        CircularDependencyError,
        MissingDependencyError,
        EngineTimeoutError,
        EngineFailureError,
    ])
    def test_every_error_is_engine_error(self, error_class):
        assert issubclass(error_class, EngineError)

    def test_dependency_errors_share_base(self):
        assert issubclass(CircularDependencyError, DependencyError)
        assert issubclass(MissingDependencyError, DependencyError)

    def test_error_messages(self):
        """Test that messages name the engine involved"""
        assert str(DuplicateEngineError("stoic")) == "Engine 'stoic' already registered"
        assert str(EngineNotFoundError("ghost")) == "Engine not found: ghost"
        assert str(MissingDependencyError("kant", "logic")) == "Missing dependency: kant requires logic"
        assert str(EngineTimeoutError("slow", 0.5)) == "Engine 'slow' timed out after 0.5s"
        assert str(EngineFailureError("broken", "boom")) == "Engine 'broken' failed: boom"
        assert str(MissingFieldError("domain", "x")) == "Engine 'x' requires domain"


@pytest.mark.asyncio
class TestEngineTimeout:
    """Tests for per-engine timeouts"""

    async def test_timeout_cancels_engine(self, registry, make_engine):
        """Test that a timed-out engine is cancelled and marked as errored"""
        slow = make_engine("slow", delay=5.0)
        registry.register(slow)

        result = await EngineOrchestrator(registry, timeout=0.05).consult("q")

        assert result.metadata["timed_out_engines"] == ["slow"]
        assert slow.cancelled
        assert slow.status == EngineStatus.ERROR

    async def test_timeout_value_is_configurable(self, registry, make_engine):
        """Test that a per-call timeout overrides the default"""
        registry.register(make_engine("medium", delay=0.1))
        orchestrator = EngineOrchestrator(registry, timeout=0.01)

        result = await orchestrator.consult("q", timeout=1.0)

        assert result.engines_consulted == ["medium"]

    async def test_multiple_engines_timeout_independently(self, registry, make_engine):
        """Test that each engine gets its own deadline"""
        registry.register(make_engine("fast-1", delay=0.01))
        registry.register(make_engine("slow-1", delay=1.0))
        registry.register(make_engine("fast-2", delay=0.02))
        registry.register(make_engine("slow-2", delay=1.0))

        result = await EngineOrchestrator(registry, timeout=0.2).consult("q")

        assert result.engines_consulted == ["fast-1", "fast-2"]
        assert result.metadata["timed_out_engines"] == ["slow-1", "slow-2"]


@pytest.mark.asyncio
class TestGracefulDegradation:
    """Tests for partial results when engines fail"""

    async def test_partial_results_returned_on_engine_failure(self, registry, make_engine):
        registry.register(make_engine("good-1", confidence=0.4))
        registry.register(make_engine("bad", error=KeyError("missing")))
        registry.register(make_engine("good-2", confidence=0.6))

        result = await EngineOrchestrator(registry).consult("q")

        assert result.engines_consulted == ["good-1", "good-2"]
        assert result.overall_confidence == pytest.approx(0.5)

    async def test_mixed_failure_and_timeout(self, registry, make_engine):
        registry.register(make_engine("ok"))
        registry.register(make_engine("bad", error=RuntimeError("x")))
        registry.register(make_engine("slow", delay=1.0))

        result = await EngineOrchestrator(registry, timeout=0.05).consult("q")

        assert result.metadata["successful_engines"] == 1
        assert result.metadata["failed_engines"] == ["bad"]
        assert result.metadata["timed_out_engines"] == ["slow"]

    async def test_failures_are_logged(self, registry, make_engine, caplog):
        registry.register(make_engine("bad", error=RuntimeError("kaboom")))

        with caplog.at_level("WARNING", logger="orchestrator.consultation"):
            await EngineOrchestrator(registry).consult("q")

        assert any("kaboom" in record.getMessage() for record in caplog.records)

    async def test_system_does_not_crash_on_engine_failure(self, registry, make_engine):
        """Test that consecutive consultations keep working after failures"""
        registry.register(make_engine("bad", error=RuntimeError("x")))
        registry.register(make_engine("ok"))
        orchestrator = EngineOrchestrator(registry)

        for _ in range(3):
            result = await orchestrator.consult("q")
            assert result.engines_consulted == ["ok"]

    async def test_cancelling_consultation_propagates(self, registry, make_engine):
        """Test that cancelling the caller cancels the engines"""
        slow = make_engine("slow", delay=5.0)
        registry.register(slow)
        orchestrator = EngineOrchestrator(registry, timeout=10.0)

        task = asyncio.create_task(orchestrator.consult("q"))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert slow.cancelled


@pytest.mark.asyncio
class TestFunctionalEngineDispatch:
    """Tests for callback engines dispatched through consult()"""

    async def test_blocking_evaluator_times_out(self, registry, make_engine):
        """Test that a slow blocking callback is reported as timed out"""
        def slow(input, context):
            time.sleep(0.5)
            return {"insight": "too late", "confidence": 0.6}

        registry.register(create_functional_engine(
            id="slow-sync", domain="ethics", capabilities=["x"], evaluator=slow
        ))
        registry.register(make_engine("fast"))

        result = await EngineOrchestrator(registry, timeout=0.1).consult("q")

        assert result.engines_consulted == ["fast"]
        assert result.metadata["timed_out_engines"] == ["slow-sync"]
        assert all(insight.engine_id != "slow-sync" for insight in result.insights)

    async def test_blocking_evaluator_runs_alongside_siblings(self, registry, make_engine):
        """Test that a blocking callback does not stall concurrent engines"""
        released = threading.Event()

        def waiting(input, context):
            was_released = released.wait(timeout=2.0)
            return {"insight": "released" if was_released else "blocked", "confidence": 0.5}

        async def releasing(input, context):
            await asyncio.sleep(0.01)
            released.set()
            return {"insight": "set", "confidence": 0.5}

        registry.register(create_functional_engine(
            id="waiting", domain="ethics", capabilities=["x"], evaluator=waiting
        ))
        registry.register(create_functional_engine(
            id="releasing", domain="ethics", capabilities=["x"], evaluator=releasing
        ))
        registry.register(make_engine("static"))

        result = await EngineOrchestrator(registry, timeout=3.0).consult("q")

        assert result.engines_consulted == ["waiting", "releasing", "static"]
        assert result.insights[0].content == "released"


@pytest.mark.asyncio
class TestCallArguments:
    """Tests for per-call timeout and max_engines validation"""

    @pytest.mark.parametrize("timeout", [0, -1.0])
    async def test_consult_rejects_non_positive_timeout(self, orchestrator, timeout):
        with pytest.raises(InvalidConfigurationError):
            await orchestrator.consult("q", timeout=timeout)

    async def test_consult_rejects_negative_max_engines(self, orchestrator):
        with pytest.raises(InvalidConfigurationError):
            await orchestrator.consult("q", max_engines=-1)

    async def test_deliberate_rejects_zero_timeout(self, orchestrator):
        with pytest.raises(InvalidConfigurationError):
            await orchestrator.deliberate("dilemma", timeout=0)

    async def test_zero_max_engines_selects_nothing(self, registry, make_engine):
        registry.register(make_engine("a"))

        result = await EngineOrchestrator(registry).consult("q", max_engines=0)

        assert result.insights == []
        assert result.metadata["total_engines"] == 0
