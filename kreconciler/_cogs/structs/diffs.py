"""
Structural comparison of the objects' comparable payloads.

A diff only tells whether an expected object diverges from its observed
counterpart, and explains the divergence in the logs. It is never applied
as a patch: the diverged objects are replaced as a whole.

Dicts are compared field by field. Lists and scalars are compared as a whole:
a changed list item is reported as a change of the whole list.
"""
import enum
from typing import Any, Iterator, Mapping, NamedTuple, Tuple

FieldPath = Tuple[str, ...]


class DiffScope(enum.Flag):
    """
    Which side's fields are noticed when only one side has them.

    The expected objects usually carry only the fields their authors care about,
    while the observed ones are also filled with the server-side defaults.
    The left scope (expected on the left) ignores such defaulted extra fields.
    """
    LEFT = enum.auto()
    RIGHT = enum.auto()
    FULL = LEFT | RIGHT


class DiffOperation(str, enum.Enum):
    ADD = 'add'
    CHANGE = 'change'
    REMOVE = 'remove'

    def __str__(self) -> str:
        return str(self.value)


class DiffItem(NamedTuple):
    op: DiffOperation
    path: FieldPath
    old: Any
    new: Any

    def __str__(self) -> str:
        return f"{self.op} {'.'.join(self.path) or '<root>'}: {self.old!r} -> {self.new!r}"


# An empty diff is falsy, so `if diff(...)` means "diverged".
Diff = Tuple[DiffItem, ...]


def diff(
        a: Any,
        b: Any,
        *,
        scope: DiffScope = DiffScope.FULL,
) -> Diff:
    """
    Compare two values, usually two payloads of the same object.

    The fields are visited in sorted order, so the same objects
    always produce the same diff, regardless of the dicts' ordering.
    """
    return tuple(_walk(a, b, (), scope))


def _walk(a: Any, b: Any, path: FieldPath, scope: DiffScope) -> Iterator[DiffItem]:
    if a == b:
        return
    elif isinstance(a, Mapping) and isinstance(b, Mapping):
        keys = set(a) & set(b)
        if DiffScope.LEFT in scope:
            keys |= set(a)
        if DiffScope.RIGHT in scope:
            keys |= set(b)
        for key in sorted(keys, key=str):
            yield from _walk(a.get(key), b.get(key), path + (key,), scope)
    elif a is None:
        yield DiffItem(DiffOperation.ADD, path, a, b)
    elif b is None:
        yield DiffItem(DiffOperation.REMOVE, path, a, b)
    else:
        yield DiffItem(DiffOperation.CHANGE, path, a, b)
