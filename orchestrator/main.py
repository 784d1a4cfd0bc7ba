"""
Orchestrator Main Entry Point

Builds the Symposium service from the environment:
1. Loads .env settings
2. Initializes the engine registry
3. Loads the built-in engines (unless disabled)
4. Verifies every engine's dependencies resolve
5. Runs a consultation or deliberation from the command line
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv
load_dotenv()

from engines.catalog import load_builtin_engines
from engines.shared.file_logger import setup_file_logger
from orchestrator.consultation import (
    DEFAULT_ENGINE_TIMEOUT,
    DEFAULT_MAX_ENGINES,
    EngineOrchestrator,
)
from orchestrator.registry import EngineRegistry
from orchestrator.synthesis import SynthesisStrategy

logger = logging.getLogger("orchestrator")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Dict[str, Any]:
    """
    Read service settings from the environment.

    Returns:
        Settings dict (timeout, strategy, max_engines, deliberation_domain,
        load_builtin_engines, log_level)
    """
    return {
        "timeout": float(os.getenv("ENGINE_TIMEOUT_SECONDS", str(DEFAULT_ENGINE_TIMEOUT))),
        "strategy": os.getenv("SYNTHESIS_STRATEGY", SynthesisStrategy.WEIGHTED_AVERAGE.value),
        "max_engines": int(os.getenv("MAX_ENGINES", str(DEFAULT_MAX_ENGINES))),
        "deliberation_domain": os.getenv("DELIBERATION_DOMAIN", "ethics"),
        "load_builtin_engines": _env_flag("LOAD_BUILTIN_ENGINES", True),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }


def build_orchestrator(
    settings: Optional[Dict[str, Any]] = None,
    registry: Optional[EngineRegistry] = None
) -> EngineOrchestrator:
    """
    Wire a registry and orchestrator from settings.

    Args:
        settings: Output of load_settings() (read from the environment when omitted)
        registry: Registry to populate (a fresh one when omitted)

    Returns:
        Ready-to-use EngineOrchestrator

    Raises:
        InvalidConfigurationError: On an unknown strategy or non-positive timeout
        DependencyError: If a registered engine's dependencies cannot be resolved
    """
    settings = settings or load_settings()
    if registry is None:
        registry = EngineRegistry()

    if settings.get("load_builtin_engines", True):
        load_builtin_engines(registry)

    # Fail at startup rather than on the first consultation
    for engine_id in registry.get_ids():
        order = registry.resolve_dependencies(engine_id)
        logger.debug(f"Load order for {engine_id}: {' -> '.join(order)}")

    orchestrator = EngineOrchestrator(
        registry,
        default_strategy=settings.get("strategy", SynthesisStrategy.WEIGHTED_AVERAGE),
        timeout=settings.get("timeout", DEFAULT_ENGINE_TIMEOUT),
        max_engines=settings.get("max_engines", DEFAULT_MAX_ENGINES),
        deliberation_domain=settings.get("deliberation_domain", "ethics")
    )

    stats = registry.get_stats()
    logger.info(
        f"Orchestrator ready: {stats.total_engines} engines across {stats.domains} domains "
        f"(strategy={orchestrator.default_strategy.value}, timeout={orchestrator.timeout}s)"
    )
    return orchestrator


async def run(args: argparse.Namespace, orchestrator: EngineOrchestrator) -> str:
    """
    Execute the requested command and return its JSON output.

    Args:
        args: Parsed command line
        orchestrator: Orchestrator to run against

    Returns:
        JSON string of the result
    """
    if args.command == "deliberate":
        result = await orchestrator.deliberate(args.text, traditions=args.traditions)
    else:
        result = await orchestrator.consult(
            args.text,
            domains=args.domains,
            capabilities=args.capabilities,
            engines=args.engines,
            strategy=args.strategy
        )
    return result.model_dump_json(indent=2)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Symposium consultation locally")
    parser.add_argument("command", choices=["consult", "deliberate"])
    parser.add_argument("text", help="Question or dilemma")
    parser.add_argument("--domain", dest="domains", action="append", help="Domain to consult (repeatable)")
    parser.add_argument("--capability", dest="capabilities", action="append", help="Required capability (repeatable)")
    parser.add_argument("--engine", dest="engines", action="append", help="Engine id to consult (repeatable)")
    parser.add_argument("--tradition", dest="traditions", action="append", help="Tradition to deliberate with (repeatable)")
    parser.add_argument("--strategy", choices=[s.value for s in SynthesisStrategy], help="Synthesis strategy")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    settings = load_settings()

    setup_file_logger("orchestrator", log_level=settings["log_level"], attach=["engines"])

    orchestrator = build_orchestrator(settings)
    print(await run(args, orchestrator))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n[ORCHESTRATOR] Interrupted")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"[ORCHESTRATOR] Fatal error: {e}")
        sys.exit(1)
