"""
Object bags: the data currency passed between the reconciliation stages.

A bag is an ordered append-only collection of objects, each tagged with its
lifecycle class. A bag is owned by the stage that has produced it, and then
handed over to the next stage; it is never mutated by two stages at once.

The bags do not de-duplicate the objects by their identities. Duplicates
are the producer's bug: the reconciliation matches the first one it meets.
"""
import dataclasses
import enum
from typing import Any, Dict, Iterable, Iterator, Sequence, Tuple

from kreconciler._cogs.structs import bodies


class Lifecycle(str, enum.Enum):
    """
    Who is responsible for the object's existence.

    Managed objects are owned by a component and fully CRUD'd by the engine.
    Referenced objects are expected to pre-exist: they are only read,
    and their absence is an error, never a reason to create them.
    """
    MANAGED = 'managed'
    REFERENCED = 'referenced'

    def __str__(self) -> str:
        return str(self.value)


@dataclasses.dataclass
class TaggedObject:
    obj: Dict[str, Any]
    lifecycle: Lifecycle = Lifecycle.MANAGED

    @property
    def identity(self) -> bodies.ObjectIdentity:
        return bodies.identify(self.obj)


class ObjectBag(Iterable[TaggedObject]):

    def __init__(self, __items: Iterable[TaggedObject] = ()) -> None:
        super().__init__()
        self._items = list(__items)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._items!r})'

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[TaggedObject]:
        return iter(tuple(self._items))

    def add(self, *items: TaggedObject) -> None:
        self._items.extend(items)

    def items(self) -> Tuple[TaggedObject, ...]:
        return tuple(self._items)

    def objects(self) -> Sequence[Dict[str, Any]]:
        return [item.obj for item in self._items]

    @classmethod
    def of(
            cls,
            objs: Iterable[Dict[str, Any]],
            lifecycle: Lifecycle = Lifecycle.MANAGED,
    ) -> "ObjectBag":
        return cls(TaggedObject(obj, lifecycle) for obj in objs)
