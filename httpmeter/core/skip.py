"""Skip predicate: which request paths are never measured."""

from collections.abc import Callable, Iterable


class PathSkipper:
    """Decides whether a request path is excluded from measurement.

    The wrapped callable must be pure and thread-safe; it is shared by every
    concurrent request.

    Usage:
        skipper = PathSkipper.from_paths(exact=["/health"], prefixes=["/metrics"])
        skipper.should_skip("/metrics/extra")  # True
    """

    def __init__(self, skip: Callable[[str], bool]) -> None:
        if not callable(skip):
            raise TypeError("skip must be callable")
        self._skip = skip

    @classmethod
    def never(cls) -> "PathSkipper":
        """Measure every request."""
        return cls(lambda _path: False)

    @classmethod
    def from_paths(
        cls,
        exact: Iterable[str] = (),
        prefixes: Iterable[str] = (),
    ) -> "PathSkipper":
        """Skip paths equal to one of *exact* or starting with one of *prefixes*."""
        exact_set = frozenset(exact)
        prefix_tuple = tuple(prefixes)

        if not exact_set and not prefix_tuple:
            return cls.never()

        def skip(path: str) -> bool:
            return path in exact_set or (bool(prefix_tuple) and path.startswith(prefix_tuple))

        return cls(skip)

    def should_skip(self, path: str) -> bool:
        return bool(self._skip(path))
