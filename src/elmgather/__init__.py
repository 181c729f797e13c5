from elmgather.gatherer import (
    GatherResult,
    InterfaceFile,
    collect_source_files,
    dependency_path,
    gather,
    gather_all,
    get_dependency_files,
)
from elmgather.manifest import ManifestError

__all__ = [
    "GatherResult",
    "InterfaceFile",
    "ManifestError",
    "collect_source_files",
    "dependency_path",
    "gather",
    "gather_all",
    "get_dependency_files",
]
