from ._version import __version__
from .assets import AssetDeclaration, AssetGroup, InstalledPackage, parse_extra
from .errors import AssetConflictError, AssetPluginError, ManifestParseError, PackageManagerError
from .hook import install_or_update
from .manifest import collect_assets, reconcile_manifest

__all__ = [
    "AssetConflictError",
    "AssetDeclaration",
    "AssetGroup",
    "AssetPluginError",
    "InstalledPackage",
    "ManifestParseError",
    "PackageManagerError",
    "__version__",
    "collect_assets",
    "install_or_update",
    "parse_extra",
    "reconcile_manifest",
]
