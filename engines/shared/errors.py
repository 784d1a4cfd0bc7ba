"""
Project Symposium - Error Taxonomy

Construction and registry-mutation errors are raised to the caller.
Per-engine failures during a consultation are contained by the orchestrator.
"""

from typing import List, Optional


class EngineError(Exception):
    """Base class for all engine, registry and orchestration errors"""


class InvalidConfigurationError(EngineError):
    """Engine definition is malformed"""


class MissingFieldError(InvalidConfigurationError):
    """A required engine field (id, domain, capabilities) is absent"""

    def __init__(self, field: str, engine_id: Optional[str] = None):
        self.field = field
        self.engine_id = engine_id
        target = f"Engine '{engine_id}'" if engine_id else "Engine"
        super().__init__(f"{target} requires {field}")


class DuplicateEngineError(EngineError):
    """An engine with the same id is already registered"""

    def __init__(self, engine_id: str):
        self.engine_id = engine_id
        super().__init__(f"Engine '{engine_id}' already registered")


class EngineNotFoundError(EngineError):
    """No engine registered under the requested id"""

    def __init__(self, engine_id: str):
        self.engine_id = engine_id
        super().__init__(f"Engine not found: {engine_id}")


class DependencyError(EngineError):
    """Dependency resolution failed"""


class CircularDependencyError(DependencyError):
    """A dependency cycle was found while resolving load order"""

    def __init__(self, engine_id: str, path: List[str]):
        self.engine_id = engine_id
        self.path = path
        super().__init__(
            f"Circular dependency detected: {' -> '.join(path + [engine_id])}"
        )


class MissingDependencyError(DependencyError):
    """A declared dependency is not registered"""

    def __init__(self, engine_id: str, dependency_id: str):
        self.engine_id = engine_id
        self.dependency_id = dependency_id
        super().__init__(f"Missing dependency: {engine_id} requires {dependency_id}")


class EngineTimeoutError(EngineError):
    """An engine did not produce an insight within its time budget"""

    def __init__(self, engine_id: str, timeout: float):
        self.engine_id = engine_id
        self.timeout = timeout
        super().__init__(f"Engine '{engine_id}' timed out after {timeout}s")


class EngineFailureError(EngineError):
    """The engine's own evaluation raised"""

    def __init__(self, engine_id: str, message: str):
        self.engine_id = engine_id
        super().__init__(f"Engine '{engine_id}' failed: {message}")
