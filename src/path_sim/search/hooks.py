# search/hooks.py
from typing import Protocol


class SearchHooks(Protocol):
    def search_start(self, *, origin, target, nodes): ...
    def step(self, popped, *, seq, updated, frontier, visited): ...
    def search_end(self, *, outcome, steps, visited, wall_ms): ...
    def error(self, *, reason: str, **kw): ...


class NoopHooks:
    def search_start(self, **_):
        pass

    def step(self, *_, **__):
        pass

    def search_end(self, **_):
        pass

    def error(self, **_):
        pass
