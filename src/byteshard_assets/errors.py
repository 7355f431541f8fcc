from __future__ import annotations


class AssetPluginError(RuntimeError):
    pass


class ManifestParseError(AssetPluginError):
    pass


class AssetConflictError(AssetPluginError):
    def __init__(self, group: str, names: list[str]) -> None:
        self.group = group
        self.names = list(names)
        joined = '", "'.join(self.names)
        super().__init__(f'There are some conflicting npm resources, type: {group} resources: "{joined}"')


class PackageManagerError(AssetPluginError):
    pass
