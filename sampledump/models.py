"""Data models: table configuration, query results and the Result type."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")
U = TypeVar("U")


class TableConfiguration(BaseModel):
    """Which rows of one table to sample and which columns to mask."""

    model_config = {"frozen": True, "extra": "forbid", "str_strip_whitespace": True}

    schema_name: str = Field(..., min_length=1)
    table_name: str = Field(..., min_length=1)
    dump_where: str = Field(..., min_length=1, description="Raw SQL predicate, trusted input")
    obfuscate_columns: tuple[str, ...] = Field(default=())

    @field_validator("obfuscate_columns", mode="before")
    @classmethod
    def dedupe_obfuscate_columns(cls, v: Any) -> tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        seen: list[str] = []
        for name in v:
            name = str(name).strip()
            if not name:
                raise ValueError("obfuscate_columns cannot contain blank names")
            if name not in seen:
                seen.append(name)
        return tuple(seen)

    @property
    def qualified_table_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def bind(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        return fn(self.value)

    def unwrap(self) -> T:
        return self.value

    def failure(self) -> None:
        return None


@dataclass(frozen=True)
class Failure:
    error: Any

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def bind(self, fn: Callable[[Any], "Result[Any]"]) -> "Failure":
        return self

    def unwrap(self) -> Any:
        raise ValueError(f"Called unwrap() on a Failure: {self.error}")

    def failure(self) -> Any:
        return self.error


Result = Union[Success[T], Failure]


def chain(*steps: Callable[[], Result]) -> Result:
    """Run steps in order, stopping at the first Failure.

    Returns that Failure, or Success(True) when every step succeeds.
    """
    result: Result = Success(True)
    for step in steps:
        result = result.bind(lambda _value, step=step: step())
        if result.is_failure:
            return result
    return Success(True)


@dataclass(frozen=True)
class ValidationFailure:
    reason: str

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True)
class MissingDumpFile:
    path: Path

    @property
    def message(self) -> str:
        return f"File {self.path} does not exist for loading!"

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Transport results and dump metrics
# ---------------------------------------------------------------------------

@dataclass
class QueryResult:
    """Rows returned by one statement, each keyed by column name."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    @classmethod
    def from_rows(cls, rows: list[dict[str, Any]]) -> "QueryResult":
        return cls(rows=list(rows), row_count=len(rows))

    def first(self) -> dict[str, Any] | None:
        return self.rows[0] if self.rows else None

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass
class DumpMetrics:
    table: str
    row_count: int = 0
    path: str = ""
    size_bytes: int = 0
    sha256: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "row_count": self.row_count,
            "path": self.path,
            "size_bytes": self.size_bytes,
            "sha256": self.sha256,
        }
