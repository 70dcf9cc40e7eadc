# src/plumbline/plugins/base.py
"""Base classes for plugin implementations.

Built-in plugins subclass BaseSource, BaseTransform or BaseSink:
- Plugin discovery uses issubclass() checks against these base classes
- Each base accepts a raw config dict or an already-parsed config model;
  subclasses parse their own typed config and pass it up, so a bad
  config fails before the run starts

The protocols in plugins/protocols.py are the contract the engine relies
on; any object satisfying them can be passed to Execution directly.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from plumbline.plugins.config_base import SinkConfig, SourceConfig, TransformConfig

if TYPE_CHECKING:
    from plumbline.contracts import ResultList
    from plumbline.engine.environment import RuntimeEnvironment
    from plumbline.plugins.protocols import ConnectionItemProtocol


class BaseSource(ABC):
    """Base class for source plugins.

    Subclass and implement get_connection_item() and check_table_exist().
    """

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any] | SourceConfig) -> None:
        self._config = config if isinstance(config, SourceConfig) else SourceConfig.from_dict(config)

    @property
    def config(self) -> SourceConfig:
        return self._config

    @abstractmethod
    def get_connection_item(self, env: "RuntimeEnvironment") -> "ConnectionItemProtocol":
        """Open a connection for this source's role."""
        ...

    @abstractmethod
    def check_table_exist(self) -> bool:
        """Return True if the declared table exists on the opened connection."""
        ...


class BaseTransform(ABC):
    """Base class for transform plugins.

    Subclass and implement process().
    """

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any] | TransformConfig) -> None:
        self._config = config if isinstance(config, TransformConfig) else TransformConfig.from_dict(config)

    @property
    def config(self) -> TransformConfig:
        return self._config

    @abstractmethod
    def process(self, env: "RuntimeEnvironment") -> "ResultList":
        """Compute this transform's result against the environment."""
        ...


class BaseSink(ABC):
    """Base class for sink plugins.

    Subclass and implement output().
    """

    name: str
    plugin_version: str = "0.0.0"

    def __init__(self, config: dict[str, Any] | SinkConfig) -> None:
        self._config = config if isinstance(config, SinkConfig) else SinkConfig.from_dict(config)

    @property
    def config(self) -> SinkConfig:
        return self._config

    @abstractmethod
    def output(self, results: Sequence["ResultList"] | None, env: "RuntimeEnvironment") -> None:
        """Write the given results (or derived error data)."""
        ...
