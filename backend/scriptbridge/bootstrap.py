"""Load script functions into the function registry, then close it for dispatch."""

import logging
from collections.abc import Mapping
from pathlib import Path

from scriptbridge.core.config import settings
from scriptbridge.engines.script import ScriptFunctionEvaluator
from scriptbridge.engines.script.executor import ScriptFunction
from scriptbridge.functions.registry import FunctionRegistry, get_function_registry

logger = logging.getLogger(__name__)

BUNDLED_API_SCRIPT = Path(__file__).parent / "engines" / "script" / "bundled" / "api_functions.py"


def read_script_dir(directory: str | Path) -> dict[str, str]:
    """Return {file name: source} for every *.py file in directory, sorted by name."""
    path = Path(directory)
    if not path.is_dir():
        logger.warning("Script directory %s does not exist", path)
        return {}
    return {p.name: p.read_text(encoding="utf-8") for p in sorted(path.glob("*.py"))}


def load_functions(
    registry: FunctionRegistry,
    evaluator: ScriptFunctionEvaluator,
    scripts: Mapping[str, str],
) -> list[ScriptFunction]:
    """
    Evaluate scripts in one pass and define every exported function. A pass
    that fails, to load or to define, leaves the registry unchanged.
    """
    functions = evaluator.load_scripts(scripts)
    registry.define_all(functions)
    for function in functions:
        logger.info(
            "Registered %s -> %s (%s)",
            function.definition.name,
            function.function_name,
            function.definition.default_permission.value,
        )
    return functions


def init(
    registry: FunctionRegistry | None = None,
    evaluator: ScriptFunctionEvaluator | None = None,
) -> FunctionRegistry:
    """
    Load the bundled API script (LOAD_BUNDLED_API) and each SCRIPT_DIRS
    directory (one pass per directory), then close the registry.
    """
    registry = registry if registry is not None else get_function_registry()
    evaluator = evaluator if evaluator is not None else ScriptFunctionEvaluator()

    if settings.LOAD_BUNDLED_API:
        load_functions(
            registry,
            evaluator,
            {"api_functions": BUNDLED_API_SCRIPT.read_text(encoding="utf-8")},
        )
    for directory in settings.SCRIPT_DIRS:
        scripts = read_script_dir(directory)
        if scripts:
            load_functions(registry, evaluator, scripts)

    registry.close()
    return registry


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("Loading script functions")
    registry = init()
    logger.info("Registered functions: %s", ", ".join(registry.names()) or "<none>")


if __name__ == "__main__":
    main()
