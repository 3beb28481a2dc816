import dataclasses
import urllib.parse
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, NamedTuple, \
                   Optional, Tuple


class NamespacedName(NamedTuple):
    """
    A reference to a specific object of an already known kind.

    Cluster-scoped objects have `None` as the namespace.
    """
    namespace: Optional[str]
    name: str

    def __str__(self) -> str:
        return f'{self.namespace}/{self.name}' if self.namespace else self.name


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A reference to a very specific custom or built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    The kind is used to map the objects' bodies to their resources.
    """

    group: str
    """
    The resource's API group; e.g. ``"example.com"``, ``"apps"``, ``"batch"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"pods"``, ``"configmaps"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: str
    """
    The resource's kind (as in YAML files); e.g. ``"Pod"``, ``"ConfigMap"``.
    """

    namespaced: bool = True
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    subresources: FrozenSet[str] = frozenset()
    """
    The resource's subresources, if defined; e.g. ``{"status", "scale"}``.
    """

    def __hash__(self) -> int:
        return hash((self.group, self.version, self.plural))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            self_tuple = (self.group, self.version, self.plural)
            other_tuple = (other.group, other.version, other.plural)
            return self_tuple == other_tuple
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            namespace: Optional[str] = None,
            name: Optional[str] = None,
            subresource: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Build a URL to be used with K8s API.

        If the namespace is not set, a cluster-wide URL is returned.
        For cluster-scoped resources, the namespace is ignored.

        If the name is not set, the URL for the resource list is returned.
        Otherwise (if set), the URL for the individual resource is returned.

        Params go to the query parameters (``?param1=value1&param2=value2...``).
        """
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by their name.")
        if self.namespaced and namespace is None and name is not None:
            raise ValueError("Specific namespaces are required for specific namespaced resources.")

        parts: List[Optional[str]] = [
            '/api' if self.group == '' and self.version == 'v1' else '/apis',
            self.group,
            self.version,
            'namespaces' if self.namespaced and namespace else None,
            namespace if self.namespaced and namespace else None,
            self.plural,
            name,
            subresource,
        ]

        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')


class UnregisteredKindError(LookupError):
    """ Raised when an object's kind is not known to the scheme. """


class Scheme:
    """
    A registry of the resource kinds known to a reconciler.

    The scheme is constructed by the application at startup and passed
    explicitly to the object store and to the components (for building
    the observables); there is no process-wide registry.
    """

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        super().__init__()
        self._resources: Dict[Tuple[str, str], Resource] = {}
        self.register(*resources)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({list(self._resources.values())!r})'

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, key: object) -> bool:
        return key in self._resources

    def register(self, *resources: Resource) -> None:
        for resource in resources:
            self._resources[(resource.api_version, resource.kind)] = resource

    def lookup(self, api_version: str, kind: str) -> Resource:
        try:
            return self._resources[(api_version, kind)]
        except KeyError:
            raise UnregisteredKindError(f"Unknown kind {kind!r} of {api_version!r}.") from None


BUILTIN_RESOURCES: Tuple[Resource, ...] = (
    Resource('', 'v1', 'pods', 'Pod', subresources=frozenset({'status'})),
    Resource('', 'v1', 'services', 'Service', subresources=frozenset({'status'})),
    Resource('', 'v1', 'configmaps', 'ConfigMap'),
    Resource('', 'v1', 'secrets', 'Secret'),
    Resource('', 'v1', 'serviceaccounts', 'ServiceAccount'),
    Resource('', 'v1', 'persistentvolumeclaims', 'PersistentVolumeClaim',
             subresources=frozenset({'status'})),
    Resource('', 'v1', 'namespaces', 'Namespace', namespaced=False,
             subresources=frozenset({'status'})),
    Resource('apps', 'v1', 'deployments', 'Deployment', subresources=frozenset({'status', 'scale'})),
    Resource('apps', 'v1', 'statefulsets', 'StatefulSet', subresources=frozenset({'status', 'scale'})),
    Resource('apps', 'v1', 'daemonsets', 'DaemonSet', subresources=frozenset({'status'})),
    Resource('batch', 'v1', 'jobs', 'Job', subresources=frozenset({'status'})),
    Resource('policy', 'v1', 'poddisruptionbudgets', 'PodDisruptionBudget',
             subresources=frozenset({'status'})),
    Resource('networking.k8s.io', 'v1', 'ingresses', 'Ingress', subresources=frozenset({'status'})),
    Resource('rbac.authorization.k8s.io', 'v1', 'roles', 'Role'),
    Resource('rbac.authorization.k8s.io', 'v1', 'rolebindings', 'RoleBinding'),
)
