"""
Declarative read requests: what should be looked up in the object store.

An observable is either a point lookup of one object by its identity,
or a set lookup of all objects of a kind matching a label selector.
They are stateless and constructed fresh on every reconciliation pass.
"""
import dataclasses
from typing import Any, Mapping, Optional

from kreconciler._cogs.structs import bodies


@dataclasses.dataclass(frozen=True)
class Observable:
    api_version: str
    kind: str
    namespace: Optional[str] = None
    name: Optional[str] = None
    labels: Optional[bodies.Labels] = None

    def __post_init__(self) -> None:
        if self.name is None and self.labels is None:
            raise ValueError("An observable needs either a name or labels, got neither.")
        if self.name is not None and self.labels is not None:
            raise ValueError("An observable needs either a name or labels, got both.")

    def __str__(self) -> str:
        if self.is_point:
            return f'{self.namespace or ""}/{self.kind}/{self.name}'
        else:
            return f'{self.namespace or "*"}/{self.kind}?{format_label_selector(self.labels or {})}'

    @property
    def is_point(self) -> bool:
        return self.labels is None

    @classmethod
    def for_object(cls, body: Mapping[str, Any]) -> "Observable":
        identity = bodies.identify(body)
        return cls(
            api_version=body.get('apiVersion', ''),
            kind=identity.kind,
            namespace=identity.namespace or None,
            name=identity.name,
        )

    @classmethod
    def for_selector(
            cls,
            api_version: str,
            kind: str,
            labels: bodies.Labels,
            namespace: Optional[str] = None,
    ) -> "Observable":
        return cls(api_version=api_version, kind=kind, namespace=namespace, labels=dict(labels))


def format_label_selector(labels: bodies.Labels) -> str:
    """
    Render the labels as an equality-based selector, as K8s API expects it.
    """
    return ','.join(f'{key}={val}' for key, val in sorted(labels.items()))


def match_labels(labels: bodies.Labels, body: Mapping[str, Any]) -> bool:
    obj_labels = body.get('metadata', {}).get('labels', {})
    return all(obj_labels.get(key) == val for key, val in labels.items())
