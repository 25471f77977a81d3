"""Query configuration.

Every analysis takes a ``QueryConfig``; nothing reads process-wide state
during a query. ``QueryConfig.from_env`` is the one place environment
variables are consulted.
"""

import os

from pydantic import BaseModel, Field, field_validator

from heaptrace.logging import QueryLog, Verbosity

DEFAULT_MAX_QUEUE_LENGTH = 10000
DEFAULT_MAX_PATH_LENGTH = 10

# Node ids below this are usually runtime internals rather than user code.
USER_NODE_THRESHOLD = 0x1000000


class QueryConfig(BaseModel):
    """Bounds and verbosity applied to a query."""

    verbosity: Verbosity = Field(
        default=Verbosity.NORMAL, description="How much detail queries log"
    )
    max_queue_length: int = Field(
        default=DEFAULT_MAX_QUEUE_LENGTH,
        ge=1,
        description="Largest retained-set work queue before the search is aborted",
    )
    max_path_length: int = Field(
        default=DEFAULT_MAX_PATH_LENGTH,
        ge=1,
        description="Longest path (in nodes) explored by path search",
    )
    user_node_threshold: int = Field(
        default=USER_NODE_THRESHOLD,
        ge=0,
        description="Ids at or above this are treated as user-code nodes when listing",
    )

    model_config = {"frozen": True}

    @field_validator("verbosity", mode="before")
    @classmethod
    def _parse_verbosity(cls, value: object) -> Verbosity:
        if isinstance(value, (str, int)):
            return Verbosity.parse(value)
        return value  # type: ignore[return-value]

    @classmethod
    def from_env(cls, **overrides: object) -> "QueryConfig":
        """Build a config from HEAPTRACE_* variables.

        Keyword arguments that are not None take precedence over the
        environment.
        """
        values: dict[str, object] = {}
        env_map = {
            "verbosity": "HEAPTRACE_VERBOSITY",
            "max_queue_length": "HEAPTRACE_MAX_QUEUE_LENGTH",
            "max_path_length": "HEAPTRACE_MAX_PATH_LENGTH",
        }
        for field, var in env_map.items():
            raw = os.getenv(var)
            if raw:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def silenced(self) -> "QueryConfig":
        """Copy of this config that logs nothing."""
        return self.model_copy(update={"verbosity": Verbosity.SILENT})

    def query_log(self) -> QueryLog:
        return QueryLog(self.verbosity)


def resolve_config(config: QueryConfig | None) -> QueryConfig:
    return config if config is not None else QueryConfig()
