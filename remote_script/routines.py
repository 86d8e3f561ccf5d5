"""Registry of named deployment routines.

Routines are coroutine functions taking the workspace path. They are
registered explicitly with the ``routine`` decorator or through the
``remote_script.routines`` entry-point group of installed packages.

Example:
    from remote_script import Runner, routine

    @routine("web")
    async def deploy_web(workspace: Path) -> None:
        async with await Runner.create() as runner:
            await runner.copy_files("0644", "/srv/web", workspace, "dist/app.tar")
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from importlib.metadata import entry_points
from pathlib import Path

from remote_script.errors import ConfigError, DeploymentError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "remote_script.routines"

Routine = Callable[[Path], Awaitable[None]]


class RoutineRegistry:
    """Named deployment routines, run in caller-specified order."""

    def __init__(self) -> None:
        self._routines: dict[str, Routine] = {}

    def add(self, name: str, fn: Routine) -> None:
        """Register ``fn`` under ``name``.

        Raises:
            ConfigError: If the name is already registered
        """
        if name in self._routines:
            raise ConfigError("routine", f"routine {name!r} already registered")
        self._routines[name] = fn
        logger.debug("Registered routine %s", name)

    def register(self, name: str | None = None) -> Callable[[Routine], Routine]:
        """Decorator registering a routine under ``name`` (defaults to its __name__)."""

        def decorator(fn: Routine) -> Routine:
            self.add(name or fn.__name__, fn)
            return fn

        return decorator

    def get(self, name: str) -> Routine:
        try:
            return self._routines[name]
        except KeyError:
            raise ConfigError("routine", f"unknown routine {name!r}") from None

    def names(self) -> list[str]:
        return sorted(self._routines)

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register routines advertised by installed packages.

        Returns:
            Number of routines loaded
        """
        loaded = 0
        for entry_point in entry_points(group=group):
            if entry_point.name in self._routines:
                continue
            self.add(entry_point.name, entry_point.load())
            loaded += 1
        return loaded

    async def run(self, workspace: str | Path, names: Iterable[str]) -> None:
        """Run routines in order, stopping at the first failure.

        Args:
            workspace: Path handed to every routine
            names: Routine names in execution order

        Raises:
            ConfigError: If a name is unknown (checked before anything runs)
            DeploymentError: If a routine fails
        """
        workspace = Path(workspace)
        selected = [(name, self.get(name)) for name in names]

        for name, fn in selected:
            logger.info("Running routine %s (workspace=%s)", name, workspace)
            try:
                await fn(workspace)
            except Exception as e:
                logger.error("Routine %s failed: %s", name, e)
                raise DeploymentError(name, e) from e
            logger.info("Routine %s completed", name)


registry = RoutineRegistry()
routine = registry.register
