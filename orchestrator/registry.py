"""
Engine Registry - In-memory engine registration and discovery

Indexes engines by id, domain (including subdomains) and capability, and
resolves declared dependencies into a load order.
Thread-safe for concurrent access.
"""

import logging
from threading import RLock
from typing import Dict, List, Optional

from engines.shared.base_engine import Engine, EngineStatus
from engines.shared.errors import (
    CircularDependencyError,
    DuplicateEngineError,
    EngineNotFoundError,
    InvalidConfigurationError,
    MissingDependencyError,
)
from engines.shared.schemas import RegistrySnapshot, RegistryStats

logger = logging.getLogger(__name__)

# Three-colour marking for dependency traversal
_UNVISITED = 0
_VISITING = 1
_VISITED = 2


class EngineRegistry:
    """
    In-memory registry for engine registration and discovery.

    Maintains four indices, always kept consistent:
    - engine id -> Engine
    - domain -> engine ids (primary domain and every subdomain)
    - capability -> engine ids
    - engine id -> declared dependency ids

    Index lists keep registration order, so lookups are stable between calls.

    Example:
        registry = EngineRegistry()
        registry.register(StoicEngine()).register(KantianEngine())
        ethics_engines = registry.get_by_domain("ethics")
    """

    def __init__(self):
        """Initialize empty registry with thread-safe lock"""
        self._engines: Dict[str, Engine] = {}
        self._by_domain: Dict[str, List[str]] = {}
        self._by_capability: Dict[str, List[str]] = {}
        self._dependency_graph: Dict[str, List[str]] = {}
        self._lock = RLock()

    def register(self, engine: Engine) -> "EngineRegistry":
        """
        Register an engine.

        Args:
            engine: Engine instance to register

        Returns:
            This registry (for chaining)

        Raises:
            InvalidConfigurationError: If the object is not an Engine
            DuplicateEngineError: If an engine with the same id is registered
        """
        if not isinstance(engine, Engine):
            raise InvalidConfigurationError(
                f"Invalid engine: expected Engine, got {type(engine).__name__}"
            )

        with self._lock:
            if engine.id in self._engines:
                raise DuplicateEngineError(engine.id)

            self._engines[engine.id] = engine

            for domain in [engine.domain, *engine.subdomains]:
                ids = self._by_domain.setdefault(domain, [])
                if engine.id not in ids:
                    ids.append(engine.id)

            for capability in engine.capabilities:
                ids = self._by_capability.setdefault(capability, [])
                if engine.id not in ids:
                    ids.append(engine.id)

            self._dependency_graph[engine.id] = engine.dependencies

        logger.debug(f"Registered engine: {engine.id} (domain={engine.domain})")
        return self

    def unregister(self, engine_id: str) -> bool:
        """
        Remove an engine from every index.

        Args:
            engine_id: Id of engine to remove

        Returns:
            True if engine was removed, False if not found
        """
        with self._lock:
            engine = self._engines.get(engine_id)
            if engine is None:
                return False

            for domain in [engine.domain, *engine.subdomains]:
                self._discard(self._by_domain, domain, engine_id)

            for capability in engine.capabilities:
                self._discard(self._by_capability, capability, engine_id)

            del self._dependency_graph[engine_id]
            del self._engines[engine_id]

        logger.debug(f"Unregistered engine: {engine_id}")
        return True

    @staticmethod
    def _discard(index: Dict[str, List[str]], key: str, engine_id: str) -> None:
        ids = index.get(key)
        if ids is None:
            return
        if engine_id in ids:
            ids.remove(engine_id)
        if not ids:
            del index[key]

    def get(self, engine_id: str) -> Optional[Engine]:
        """Get an engine by id, or None."""
        with self._lock:
            return self._engines.get(engine_id)

    def has(self, engine_id: str) -> bool:
        """Check if an engine is registered."""
        with self._lock:
            return engine_id in self._engines

    def __contains__(self, engine_id: str) -> bool:
        return self.has(engine_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)

    def get_by_domain(self, domain: str) -> List[Engine]:
        """
        Get all engines in a domain (primary or subdomain).

        Args:
            domain: Domain to query

        Returns:
            Engines in registration order
        """
        with self._lock:
            return [self._engines[i] for i in self._by_domain.get(domain, [])]

    def get_by_capability(self, capability: str) -> List[Engine]:
        """
        Get all engines offering a capability.

        Args:
            capability: Capability tag to query

        Returns:
            Engines in registration order
        """
        with self._lock:
            return [self._engines[i] for i in self._by_capability.get(capability, [])]

    def query(
        self,
        domain: Optional[str] = None,
        capabilities: Optional[List[str]] = None,
        tradition: Optional[str] = None,
        status: Optional[EngineStatus] = None
    ) -> List[Engine]:
        """
        Get all engines matching every given criterion.

        Args:
            domain: Required domain (subdomains count)
            capabilities: Required capabilities (all must be present)
            tradition: Exact tradition
            status: Exact status

        Returns:
            Matching engines in registration order
        """
        with self._lock:
            candidates = list(self._engines.values())

        if domain:
            candidates = [e for e in candidates if e.in_domain(domain)]

        if capabilities:
            candidates = [
                e for e in candidates
                if all(e.has_capability(cap) for cap in capabilities)
            ]

        if tradition:
            candidates = [e for e in candidates if e.tradition == tradition]

        if status:
            candidates = [e for e in candidates if e.status == EngineStatus(status)]

        return candidates

    def get_ids(self) -> List[str]:
        """List all registered engine ids."""
        with self._lock:
            return list(self._engines.keys())

    def get_all(self) -> List[Engine]:
        """List all registered engines."""
        with self._lock:
            return list(self._engines.values())

    def get_domains(self) -> List[str]:
        """List all known domains."""
        with self._lock:
            return list(self._by_domain.keys())

    def get_capabilities(self) -> List[str]:
        """List all known capabilities."""
        with self._lock:
            return list(self._by_capability.keys())

    def resolve_dependencies(self, engine_id: str) -> List[str]:
        """
        Resolve the load order for an engine and everything it depends on.

        Depth-first traversal with three-colour marking; dependencies come
        before their dependents and the requested engine is last.

        Args:
            engine_id: Engine id

        Returns:
            Ordered list of engine ids

        Raises:
            EngineNotFoundError: If engine_id is not registered
            MissingDependencyError: If a declared dependency is not registered
            CircularDependencyError: If the dependency graph has a cycle
        """
        with self._lock:
            if engine_id not in self._engines:
                raise EngineNotFoundError(engine_id)
            graph = {k: list(v) for k, v in self._dependency_graph.items()}

        colour: Dict[str, int] = {}
        path: List[str] = []
        resolved: List[str] = []

        def visit(current: str) -> None:
            state = colour.get(current, _UNVISITED)
            if state == _VISITED:
                return
            if state == _VISITING:
                cycle_start = path.index(current)
                raise CircularDependencyError(current, path[cycle_start:])

            colour[current] = _VISITING
            path.append(current)

            for dep in graph.get(current, []):
                if dep not in graph:
                    raise MissingDependencyError(current, dep)
                visit(dep)

            path.pop()
            colour[current] = _VISITED
            resolved.append(current)

        visit(engine_id)
        return resolved

    def get_dependents(self, engine_id: str) -> List[str]:
        """
        Get engines that declare a dependency on the given engine.

        Args:
            engine_id: Engine id

        Returns:
            Ids of dependent engines
        """
        with self._lock:
            return [
                dependent
                for dependent, deps in self._dependency_graph.items()
                if engine_id in deps
            ]

    def get_stats(self) -> RegistryStats:
        """Get registry statistics."""
        with self._lock:
            by_status: Dict[str, int] = {}
            for engine in self._engines.values():
                by_status[engine.status.value] = by_status.get(engine.status.value, 0) + 1

            return RegistryStats(
                total_engines=len(self._engines),
                domains=len(self._by_domain),
                capabilities=len(self._by_capability),
                by_status=by_status,
                by_domain={domain: len(ids) for domain, ids in self._by_domain.items()}
            )

    def snapshot(self) -> RegistrySnapshot:
        """Export engine definitions and stats for persistence or debugging."""
        with self._lock:
            definitions = [engine.get_definition() for engine in self._engines.values()]
        return RegistrySnapshot(engines=definitions, stats=self.get_stats())

    def clear(self) -> None:
        """Remove every registered engine."""
        with self._lock:
            self._engines.clear()
            self._by_domain.clear()
            self._by_capability.clear()
            self._dependency_graph.clear()


default_registry = EngineRegistry()


def get_default_registry() -> EngineRegistry:
    """Process-wide convenience registry. Nothing requires it."""
    return default_registry
