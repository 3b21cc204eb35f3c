from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

if TYPE_CHECKING:
    from synchro.git import SynchroRegistry


class ManifestParseError(Exception):
    """Raised when a module manifest cannot be read or validated."""

    def __init__(self, message: str, manifest_file: Optional[Path] = None):
        self.message = message
        self.manifest_file = manifest_file
        super().__init__(message)

    def __str__(self) -> str:
        if self.manifest_file is not None:
            return f"{self.manifest_file}: {self.message}"
        return self.message


class ModuleEntry(BaseModel):
    """A module as declared in the manifest"""

    name: str
    remote: str
    ref: str = "HEAD"
    # Relative to the manifest basedir. Defaults to the module name.
    path: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Module name must be non-empty")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Module name '{v}' must not be a path")
        return v

    @field_validator("remote", "ref")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value must be non-empty")
        return v.strip()


class Manifest(BaseModel):
    """Set of modules deployed together under a base directory"""

    basedir: str = "modules"
    modules: List[ModuleEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_names(self):
        seen = set()
        duplicates = []
        for module in self.modules:
            if module.name in seen:
                duplicates.append(module.name)
            seen.add(module.name)
        if duplicates:
            raise ValueError(f"Duplicate module names: {', '.join(duplicates)}")
        return self

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "Manifest":
        """Alternative constructor that loads from YAML string"""
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ManifestParseError(f"Invalid YAML: {e}")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ManifestParseError("Manifest must be a mapping")
        try:
            return cls(**data)
        except ValidationError as e:
            raise ManifestParseError(str(e))

    @classmethod
    def from_file(cls, manifest_file: Union[str, Path]) -> "Manifest":
        """
        Load a manifest file. A relative basedir is anchored at the
        directory containing the manifest.
        """
        manifest_file = Path(manifest_file)
        try:
            manifest = cls.from_yaml(manifest_file.read_text())
        except ManifestParseError as e:
            raise ManifestParseError(e.message, manifest_file)

        basedir = Path(manifest.basedir).expanduser()
        if not basedir.is_absolute():
            basedir = manifest_file.resolve().parent / basedir
        manifest.basedir = str(basedir)
        return manifest

    def select(self, names: Optional[List[str]] = None) -> List[ModuleEntry]:
        """
        Pick modules by name, in manifest order. All modules if names is empty.

        Raises:
            KeyError: If a name is not in the manifest
        """
        if not names:
            return list(self.modules)
        known = {module.name for module in self.modules}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise KeyError(f"Unknown modules: {', '.join(unknown)}")
        return [module for module in self.modules if module.name in names]

    def git_modules(
        self, registry: "SynchroRegistry", names: Optional[List[str]] = None
    ) -> List["GitModule"]:
        basedir = Path(self.basedir)
        return [
            GitModule(
                name=entry.name,
                remote=entry.remote,
                ref=entry.ref,
                full_path=basedir / (entry.path or entry.name),
                registry=registry,
            )
            for entry in self.select(names)
        ]


class GitModule:
    """A module checked out from a git remote into its own directory."""

    def __init__(
        self,
        name: str,
        remote: str,
        ref: str,
        full_path: Path,
        registry: "SynchroRegistry",
    ):
        self.name = name
        self.remote = remote
        self.ref = ref
        self.full_path = Path(full_path)
        self.registry = registry

    def __repr__(self) -> str:
        return f"GitModule(name={self.name!r}, remote={self.remote!r}, ref={self.ref!r})"

    def sync(self, update_cache: bool = True) -> str:
        synchro = self.registry.get_or_create(self.remote)
        return synchro.sync(self.full_path, self.ref, update_cache=update_cache)
