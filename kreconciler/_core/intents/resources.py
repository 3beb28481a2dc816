"""
Custom resources: the root entities of the desired state.

The application subclasses `CustomResource` for every kind it reconciles,
declares the kind's ``api_version`` & ``kind``, and decomposes the resource
into its components. The class itself is the "handle" given to the reconciler:
it is instantiated with a freshly fetched body on every reconciliation pass.

Example::

    class MyApp(kreconciler.CustomResource):
        api_version = 'example.com/v1'
        kind = 'MyApp'
        finalizer = 'example.com/cleanup'

        def validate(self):
            if not self.spec.get('image'):
                raise kreconciler.ValidationError("spec.image is required.")

        def components(self):
            return [DeploymentComponent('deployment', self), ServiceComponent('service', self)]
"""
import copy
import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Mapping, Optional, Sequence

from kreconciler._cogs.structs import bodies, diffs, finalizers

if TYPE_CHECKING:
    from kreconciler._core.intents import components


class CustomResource:
    api_version: ClassVar[str]
    kind: ClassVar[str]

    finalizer: ClassVar[Optional[str]] = None
    """
    A finalizer to block the resource's deletion until its components are finalized.

    It is added by the default `update_status` while the resource is alive,
    and removed once all components are finalized without errors.
    """

    def __init__(self, body: Dict[str, Any]) -> None:
        super().__init__()
        self.body = body

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.namespace or ""}/{self.name}>'

    @property
    def name(self) -> str:
        return bodies.identify(self.body).name

    @property
    def namespace(self) -> Optional[str]:
        return bodies.identify(self.body).namespace or None

    @property
    def uid(self) -> Optional[str]:
        return self.body.get('metadata', {}).get('uid')

    @property
    def labels(self) -> bodies.Labels:
        return self.body.get('metadata', {}).get('labels', {})

    @property
    def spec(self) -> Dict[str, Any]:
        return self.body.setdefault('spec', {})

    @property
    def status(self) -> Mapping[str, Any]:
        return self.body.get('status', {})

    @property
    def deletion_pending(self) -> bool:
        return finalizers.is_deletion_ongoing(self.body)

    @property
    def deletion_timestamp(self) -> Optional[datetime.datetime]:
        return finalizers.get_deletion_timestamp(self.body)

    def new_status(self) -> Any:
        """
        A fresh status object, to be filled by the components on every pass.
        """
        return {}

    def validate(self) -> None:
        """
        Check the resource's spec; raise an error to skip the components.
        """

    def apply_defaults(self) -> None:
        """
        Fill the absent fields of the spec in place, before the components run.
        """

    def components(self) -> Sequence["components.Component"]:
        raise NotImplementedError

    def update_status(self, status: Any, error: Optional[BaseException]) -> bool:
        """
        Put the status (and the pass's error, if any) into the resource's body.

        Returns ``True`` if the body has changed and should be persisted.
        """
        old_body = copy.deepcopy(self.body)

        new_status = dict(status) if isinstance(status, Mapping) else {'value': status}
        if error is not None:
            new_status['error'] = str(error)
        self.body['status'] = new_status

        if self.finalizer is not None and not self.deletion_pending:
            finalizers.block_deletion(self.body, self.finalizer)
        elif self.finalizer is not None and error is None:
            finalizers.allow_deletion(self.body, self.finalizer)

        return bool(diffs.diff(old_body, self.body))
