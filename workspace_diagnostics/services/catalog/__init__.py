# Discovery, filtering and TTL caching of the workspace file list.
from .domain_objects import CatalogConfiguration, FileCache
from .file_catalog import WorkspaceFileCatalog
from .file_lister import GitFileLister

__all__ = [
    "CatalogConfiguration",
    "FileCache",
    "GitFileLister",
    "WorkspaceFileCatalog",
]
