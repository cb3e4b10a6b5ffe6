"""Icon identities and the cache keys derived from them.

A :class:`ResourceRef` names a static resource, so every icon loaded from it
is pixel-identical and the key ``r_<namespace>_<id>`` is strong. Icons with
no cheap resource identity (bitmap-backed ones) only know their owning
package; :class:`OpaqueIdentity` yields the weak key ``bmp_<package>`` that
conflates all bitmap icons of that package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)

RAW_SUFFIX = "_raw"


class UnresolvedIdentityError(ValueError):
    """Raised when an identity cannot be turned into a cache key."""


@dataclass(frozen=True)
class ResourceRef:
    """A static resource: owning namespace plus numeric resource id."""

    owner_namespace: str
    resource_id: int


@dataclass(frozen=True)
class OpaqueIdentity:
    """An icon known only by the package that posted it."""

    package_key: str


IconIdentity = Union[ResourceRef, OpaqueIdentity]


def derive_identity(
    package: str,
    namespace: Optional[str] = None,
    resource_id: Optional[int] = None,
) -> IconIdentity:
    """Build the strongest identity available for an icon.

    A non-zero ``resource_id`` gives a :class:`ResourceRef`; the namespace
    falls back to ``package`` when the icon does not name its own.
    """
    if resource_id:
        return ResourceRef(namespace or package, resource_id)
    return OpaqueIdentity(package)


def resolve_identity_key(identity: IconIdentity, *, raw: bool = False) -> str:
    """Return the cache key for ``identity``.

    ``raw=True`` marks results computed from the unthemed raster, which may
    differ from the themed result for the same resource.

    Raises:
        UnresolvedIdentityError: if the identity is malformed.
    """
    if isinstance(identity, ResourceRef):
        if not identity.owner_namespace or identity.resource_id <= 0:
            raise UnresolvedIdentityError(f"Malformed resource reference: {identity!r}")
        key = f"r_{identity.owner_namespace}_{identity.resource_id}"
    elif isinstance(identity, OpaqueIdentity):
        if not identity.package_key:
            raise UnresolvedIdentityError("Opaque identity without a package")
        key = package_key(identity.package_key)
    else:
        raise UnresolvedIdentityError(f"Unsupported identity type: {type(identity).__name__}")
    return f"{key}{RAW_SUFFIX}" if raw else key


def package_key(package: str) -> str:
    """The weak per-package key used for bitmap-only icons."""
    return f"bmp_{package}"


def safe_identity_key(identity: Optional[IconIdentity], package: str, *, raw: bool = False) -> str:
    """Like :func:`resolve_identity_key` but never raises.

    Unresolvable identities degrade to the per-package key.
    """
    if identity is not None:
        try:
            return resolve_identity_key(identity, raw=raw)
        except UnresolvedIdentityError as exc:
            logger.warning("Falling back to package key for %s: %s", package, exc)
    key = package_key(package)
    return f"{key}{RAW_SUFFIX}" if raw else key


def raw_resource_key(ref: ResourceRef) -> str:
    """Key of the unthemed raster in the raw-resource cache."""
    return f"raw_{ref.owner_namespace}_{ref.resource_id}"


__all__ = [
    "IconIdentity",
    "OpaqueIdentity",
    "ResourceRef",
    "UnresolvedIdentityError",
    "derive_identity",
    "package_key",
    "raw_resource_key",
    "resolve_identity_key",
    "safe_identity_key",
]
