"""
The main kreconciler module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kreconciler._cogs.clients.auth import (
    APIContext,
)
from kreconciler._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from kreconciler._cogs.configs.configuration import (
    ReconcilerSettings,
    NetworkingSettings,
    ExecutionSettings,
    ComparisonSettings,
)
from kreconciler._cogs.helpers.typedefs import (
    Logger,
)
from kreconciler._cogs.helpers.versions import (
    version as __version__,
)
from kreconciler._cogs.structs.bags import (
    Lifecycle,
    TaggedObject,
    ObjectBag,
)
from kreconciler._cogs.structs.bodies import (
    Labels,
    Annotations,
    RawBody,
    OwnerReference,
    ObjectReference,
    ObjectIdentity,
    identify,
    build_owner_reference,
    build_object_reference,
)
from kreconciler._cogs.structs.credentials import (
    ConnectionInfo,
)
from kreconciler._cogs.structs.diffs import (
    Diff,
    DiffItem,
    DiffOperation,
    DiffScope,
    FieldPath,
)
from kreconciler._cogs.structs.finalizers import (
    is_deletion_ongoing,
    is_deletion_blocked,
    block_deletion,
    allow_deletion,
)
from kreconciler._cogs.structs.observables import (
    Observable,
)
from kreconciler._cogs.structs.references import (
    NamespacedName,
    Resource,
    Scheme,
    UnregisteredKindError,
    BUILTIN_RESOURCES,
)
from kreconciler._core.actions.errors import (
    ReconciliationError,
    ValidationError,
    ObservationError,
    ReferencedResourceMissing,
    MutationError,
    AggregateError,
)
from kreconciler._core.actions.loggers import (
    configure,
    LogFormat,
    ObjectLogger,
)
from kreconciler._core.engines.stores import (
    ObjectStore,
    APIObjectStore,
)
from kreconciler._core.intents.components import (
    Component,
)
from kreconciler._core.intents.resources import (
    CustomResource,
)
from kreconciler._core.reactor.processing import (
    Reconciler,
    Result,
)
from kreconciler import testing

__all__ = [
    'APIContext',
    'APIError',
    'APIClientError',
    'APIServerError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'ReconcilerSettings',
    'NetworkingSettings',
    'ExecutionSettings',
    'ComparisonSettings',
    'Logger',
    'Lifecycle',
    'TaggedObject',
    'ObjectBag',
    'Labels',
    'Annotations',
    'RawBody',
    'OwnerReference',
    'ObjectReference',
    'ObjectIdentity',
    'identify',
    'build_owner_reference',
    'build_object_reference',
    'ConnectionInfo',
    'Diff',
    'DiffItem',
    'DiffOperation',
    'DiffScope',
    'FieldPath',
    'is_deletion_ongoing',
    'is_deletion_blocked',
    'block_deletion',
    'allow_deletion',
    'Observable',
    'NamespacedName',
    'Resource',
    'Scheme',
    'UnregisteredKindError',
    'BUILTIN_RESOURCES',
    'ReconciliationError',
    'ValidationError',
    'ObservationError',
    'ReferencedResourceMissing',
    'MutationError',
    'AggregateError',
    'configure',
    'LogFormat',
    'ObjectLogger',
    'ObjectStore',
    'APIObjectStore',
    'Component',
    'CustomResource',
    'Reconciler',
    'Result',
    'testing',
]
