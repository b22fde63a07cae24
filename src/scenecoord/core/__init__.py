"""Core value types: unit identity, catalog, manifest and requests.

Architecture Note:
    core/ holds stateless values and pure helpers. Runtime state lives in
    coordinator/, and everything host-specific sits behind streaming/.
"""

from scenecoord.core.manifest import (
    ManifestEntry,
    build_unit_enum,
    catalog_from_entries,
    load_manifest,
    sanitize_identifier,
)
from scenecoord.core.requests import (
    LoadAdditive,
    LoadMode,
    LoadSingle,
    OperationRequest,
    ResolvedLoad,
    ResolvedOperation,
    ResolvedUnload,
    ResolvedUnloadThenLoad,
    Unload,
    UnloadThenLoad,
)
from scenecoord.core.units import CatalogEntry, UnitCatalog, UnitId, UnitRef, UnknownUnitError

__all__ = [
    # Units
    "UnitId",
    "UnitRef",
    "UnitCatalog",
    "CatalogEntry",
    "UnknownUnitError",
    # Manifest
    "ManifestEntry",
    "catalog_from_entries",
    "load_manifest",
    "sanitize_identifier",
    "build_unit_enum",
    # Requests
    "LoadMode",
    "LoadSingle",
    "LoadAdditive",
    "Unload",
    "UnloadThenLoad",
    "OperationRequest",
    "ResolvedOperation",
    "ResolvedLoad",
    "ResolvedUnload",
    "ResolvedUnloadThenLoad",
]
