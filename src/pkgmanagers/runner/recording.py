"""In-memory runner that records commands instead of executing them."""

from __future__ import annotations

from collections.abc import Iterable

from pkgmanagers.models import Result


class RecordingRunner:
    """Captures every argument vector and replays queued outcomes.

    Call N returns ``errors[N]`` (raised) if set, else ``results[N]`` if
    present, else an empty successful Result for the command.
    """

    def __init__(
        self,
        results: Iterable[Result] = (),
        errors: Iterable[BaseException | None] = (),
    ) -> None:
        self.results: list[Result] = list(results)
        self.errors: list[BaseException | None] = list(errors)
        self.captured: list[list[str]] = []
        self.directories: list[str] = []
        self._calls = 0

    async def run(self, directory: str, args: list[str]) -> Result:
        self.captured.append(list(args))
        self.directories.append(directory)
        index = self._calls
        self._calls += 1

        if index < len(self.errors) and self.errors[index] is not None:
            raise self.errors[index]
        if index < len(self.results):
            return self.results[index]
        return Result(command=list(args), cwd=directory)

    @property
    def last(self) -> list[str] | None:
        return self.captured[-1] if self.captured else None
