from __future__ import annotations

from typing import Dict, Generic, Iterator, List, NewType, Optional, TypeVar, cast

from cooc.errors import InvalidIdError

RowId = NewType("RowId", int)
ColumnId = NewType("ColumnId", int)

IdT = TypeVar("IdT", bound=int)


class Dictionary(Generic[IdT]):
    """Bidirectional token <-> dense id map; ids are assigned 0, 1, 2, ... in first-seen order.

    Parameterize with the id space, `Dictionary[RowId]` or `Dictionary[ColumnId]`,
    so ids from one vocabulary cannot be resolved against the other unnoticed.
    """

    def __init__(self, name: str = "dictionary"):
        self.name = name
        self._ids: Dict[str, IdT] = {}
        self._tokens: List[str] = []

    def intern(self, token: str) -> IdT:
        ident = self._ids.get(token)
        if ident is None:
            ident = cast(IdT, len(self._tokens))
            self._ids[token] = ident
            self._tokens.append(token)
        return ident

    def lookup(self, token: str) -> Optional[IdT]:
        """Return the id for an already interned token, or None."""
        return self._ids.get(token)

    def resolve(self, ident: IdT) -> str:
        if ident < 0 or ident >= len(self._tokens):
            raise InvalidIdError(ident, len(self._tokens))
        return self._tokens[ident]

    def size(self) -> int:
        return len(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"Dictionary({self.name!r}, size={len(self._tokens)})"
