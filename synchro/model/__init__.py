from .module import GitModule, Manifest, ManifestParseError, ModuleEntry

__all__ = ["GitModule", "Manifest", "ManifestParseError", "ModuleEntry"]
