"""
All the functions to manipulate the object finalization and deletion.

Finalizers are used to block the actual deletion until the finalizers
are removed, meaning that the components have done all their duties
to "release" the object (e.g. cleanups of the external resources).

A deletion-pending object is the one with ``metadata.deletionTimestamp``:
the reconciliation finalizes its components instead of reconciling them.
"""
import datetime
from typing import Any, Mapping, MutableMapping, Optional

import iso8601


def is_deletion_ongoing(
        body: Mapping[str, Any],
) -> bool:
    return body.get('metadata', {}).get('deletionTimestamp', None) is not None


def get_deletion_timestamp(
        body: Mapping[str, Any],
) -> Optional[datetime.datetime]:
    value = body.get('metadata', {}).get('deletionTimestamp', None)
    return iso8601.parse_date(value) if value is not None else None


def is_deletion_blocked(
        body: Mapping[str, Any],
        finalizer: str,
) -> bool:
    finalizers = body.get('metadata', {}).get('finalizers', [])
    return finalizer in finalizers


def block_deletion(body: MutableMapping[str, Any], finalizer: str) -> None:
    if finalizer not in body.get('metadata', {}).get('finalizers', []):
        body.setdefault('metadata', {}).setdefault('finalizers', []).append(finalizer)


def allow_deletion(body: MutableMapping[str, Any], finalizer: str) -> None:
    while finalizer in body.get('metadata', {}).get('finalizers', []):
        body['metadata']['finalizers'].remove(finalizer)
    if 'finalizers' in body.get('metadata', {}) and not body.get('metadata', {}).get('finalizers'):
        del body['metadata']['finalizers']
