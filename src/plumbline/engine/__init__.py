# src/plumbline/engine/__init__.py
"""Execution engine for plumbline validation jobs.

- RuntimeEnvironment: per-run holder of source/target/metadata connections
- Execution: ordered dispatch of sources, transforms and sinks

Example:
    from plumbline.engine import Execution, RuntimeEnvironment

    env = RuntimeEnvironment()
    result = Execution(env).execute(sources, transforms, sinks)
"""

from plumbline.engine.environment import RuntimeEnvironment
from plumbline.engine.execution import Execution

__all__ = [
    "Execution",
    "RuntimeEnvironment",
]
