"""
Components: the named units producing the desired objects of a custom resource.

The components are supplied by the application: it subclasses `Component`
and overrides the capabilities it needs. Only `expected_resources` is required;
all other capabilities have reasonable defaults.

The engine never owns the components: it only calls their capabilities
in a well-defined order on every reconciliation pass (see ``reconciling.py``)::

    expected_resources → observables → [mutate] → differs/comparable →
    update_component_status          (when the resource is alive), or
    expected_resources → observables → finalize       (when it is deleted).

The capabilities that can do I/O (`expected_resources`, `mutate`, `finalize`)
can be either sync or async; the sync ones are executed in a thread pool.
All others must be sync and fast.
"""
from typing import TYPE_CHECKING, Any, Collection, Dict, List, Mapping, Optional, \
                   Sequence, Union

from kreconciler._cogs.structs import bags, bodies, observables, references
from kreconciler._core.actions import invocation
from kreconciler._core.reactor import differing

if TYPE_CHECKING:
    from kreconciler._core.intents import resources

MANAGED_BY_LABEL = 'app.kubernetes.io/managed-by'
COMPONENT_LABEL = 'app.kubernetes.io/component'
INSTANCE_LABEL = 'app.kubernetes.io/instance'
MANAGED_BY = 'kreconciler'

BagOrCoroutine = invocation.SyncOrAsync[bags.ObjectBag]


class Component:
    """
    A named sub-unit of a custom resource's desired state.

    The component stamps its owner references onto every object it produces,
    and uses its labels to tag (and usually to find) those objects.
    By default, the owner reference points to the parent custom resource
    (if it is already stored, i.e. has a uid), and the labels identify
    the component & the parent instance.
    """

    def __init__(
            self,
            name: str,
            resource: "resources.CustomResource",
            *,
            labels: Optional[bodies.Labels] = None,
            owner_references: Optional[Sequence[bodies.OwnerReference]] = None,
    ) -> None:
        super().__init__()
        self.name = name
        self.resource = resource
        self._labels = dict(labels) if labels is not None else {
            MANAGED_BY_LABEL: MANAGED_BY,
            COMPONENT_LABEL: name,
            INSTANCE_LABEL: resource.name,
        }
        self.owner_references: List[bodies.OwnerReference] = (
            list(owner_references) if owner_references is not None else
            [bodies.build_owner_reference(resource.body)] if resource.uid else
            []
        )

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.name!r} of {self.resource!r}>'

    @property
    def labels(self) -> Dict[str, str]:
        return dict(self._labels)

    def expected_resources(
            self,
            resource: "resources.CustomResource",
            labels: bodies.Labels,
            aggregated: bags.ObjectBag,
    ) -> BagOrCoroutine:
        """
        Produce the objects that should exist for this component.

        The aggregated bag contains the expected objects of the preceding
        components of the same custom resource (in their order), so that
        the objects can refer to each other. It must not be modified.
        """
        raise NotImplementedError

    def observables(
            self,
            scheme: references.Scheme,
            resource: "resources.CustomResource",
            labels: bodies.Labels,
            expected: bags.ObjectBag,
    ) -> Collection[observables.Observable]:
        """
        Declare what should be observed to compare with the expected objects.

        By default, every expected object is looked up by its identity.
        To also delete the objects which are not expected anymore, the component
        should observe them by labels instead (see `Observable.for_selector`).
        """
        return [observables.Observable.for_object(item.obj) for item in expected]

    def mutate(
            self,
            resource: "resources.CustomResource",
            status: Any,
            expected: bags.ObjectBag,
            observed: bags.ObjectBag,
    ) -> BagOrCoroutine:
        """
        Rewrite the expected objects with the knowledge of the observed ones.

        E.g., to keep the server-assigned fields that must be preserved
        on updates (a service's cluster IP, a secret's generated data, etc.).
        Only called when reconciling, never when finalizing.
        """
        return expected

    def differs(self, expected: Mapping[str, Any], observed: Mapping[str, Any]) -> bool:
        """
        Decide whether the expected object meaningfully diverges from the observed one.

        Only consulted when the generic payload comparison has found a difference;
        both must agree for the object to be updated.
        """
        return True

    def comparable(self, body: Mapping[str, Any], fields: Collection[str]) -> Any:
        """
        Extract the comparable payload of an object for the generic comparison.
        """
        return differing.extract_payload(body, fields=fields)

    def finalize(
            self,
            resource: "resources.CustomResource",
            status: Any,
            observed: bags.ObjectBag,
    ) -> Union[None, invocation.SyncOrAsync[None]]:
        """
        Clean up when the custom resource is being deleted.

        The engine deletes nothing itself: the owned objects are usually
        garbage-collected by their owner references, while the external
        resources (if any) are the component's responsibility.
        """
        return None

    def update_component_status(
            self,
            resource: "resources.CustomResource",
            status: Any,
            reconciled: Sequence[Mapping[str, Any]],
            error: Optional[BaseException],
    ) -> None:
        """
        Merge the component's outcome into the custom resource's status.

        The reconciled objects are those believed to be live after the pass:
        the observed versions of the existing objects, and the expected
        versions of the newly created ones.
        """
