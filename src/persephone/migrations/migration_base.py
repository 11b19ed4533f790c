"""
Migration step

A migration upgrades a stored value to exactly ``version``. Steps are applied
in version order, each receiving the previous step's output.

Pattern:
- Each step of a schema has a unique version number
- migrate() applies the step forward
- rollback() optionally undoes it (used when stored data is newer than the schema)
- migrate/rollback may be plain functions or coroutine functions
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

StepFunction = Callable[[Any], Union[Any, Awaitable[Any]]]


class Migration:
    """
    One versioned transformation of a stored value.

    Example:
        Migration(2, lambda todos: [{"title": t} for t in todos])

        async def fetch_owner(data):
            data["owner"] = await lookup_owner(data["id"])
            return data

        Migration(3, fetch_owner, rollback=drop_owner)
    """

    def __init__(self, version: int, migrate: StepFunction,
                 rollback: Optional[StepFunction] = None,
                 description: str = ""):
        if not isinstance(version, int) or isinstance(version, bool):
            raise ValueError(f"Migration version must be an integer, got {version!r}")
        if version < 1:
            raise ValueError(f"Migration version must be >= 1, got {version}")
        if not callable(migrate):
            raise ValueError(f"Migration v{version}: migrate must be callable")
        if rollback is not None and not callable(rollback):
            raise ValueError(f"Migration v{version}: rollback must be callable")

        self.version = version
        self._migrate = migrate
        self._rollback = rollback
        self.description = description

    @property
    def reversible(self) -> bool:
        """True if the step declares a rollback."""
        return self._rollback is not None

    async def apply(self, data: Any) -> Any:
        """Run the forward step, awaiting it if it suspends."""
        result = self._migrate(data)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def revert(self, data: Any) -> Any:
        """Run the rollback step, awaiting it if it suspends."""
        if self._rollback is None:
            raise NotImplementedError(f"Migration v{self.version} has no rollback")
        result = self._rollback(data)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        """String representation for logging."""
        if self.description:
            return f"<Migration v{self.version}: {self.description}>"
        return f"<Migration v{self.version}>"

    def __eq__(self, other) -> bool:
        """Compare migrations by version."""
        if not isinstance(other, Migration):
            return False
        return self.version == other.version

    def __lt__(self, other) -> bool:
        """Order migrations by version."""
        if not isinstance(other, Migration):
            return NotImplemented
        return self.version < other.version

    def __hash__(self) -> int:
        """Hash by version for use in sets/dicts."""
        return hash(self.version)
