"""Case-insensitive HTTP headers.

``Headers`` is the read-only view of request headers built from the ASGI
scope. ``HeaderMap`` is the mutable set a handler fills in before the
status line is written.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only request headers. Lookup is case-insensitive.

    ``__getitem__`` returns the first value; ``get_list`` returns all.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._raw = tuple((name.lower(), value) for name, value in raw)

    def __getitem__(self, key: str) -> str:
        wanted = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name == wanted:
                return value.decode("latin-1")
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name.decode("latin-1") for name, _ in self._raw))

    def __len__(self) -> int:
        return len({name for name, _ in self._raw})

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        wanted = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name == wanted]


class HeaderMap:
    """Mutable response headers.

    ``set`` replaces every value for a name, ``add`` appends one more.
    Names are stored lower-case, which is what ASGI expects.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[tuple[str, str]] = []

    def set(self, name: str, value: str) -> None:
        self.delete(name)
        self._items.append((name.lower(), value))

    def add(self, name: str, value: str) -> None:
        self._items.append((name.lower(), value))

    def get(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for key, value in self._items:
            if key == wanted:
                return value
        return default

    def get_list(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self._items if key == wanted]

    def delete(self, name: str) -> None:
        wanted = name.lower()
        self._items = [(key, value) for key, value in self._items if key != wanted]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __repr__(self) -> str:
        return f"HeaderMap({self._items!r})"


def to_mapping(items: Iterable[tuple[str, str]]) -> Mapping[str, str]:
    """First value per lower-cased name."""
    result: dict[str, str] = {}
    for name, value in items:
        result.setdefault(name.lower(), value)
    return result
