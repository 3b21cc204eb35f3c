"""Tests for the module manifest model."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from synchro.git import SynchroRegistry
from synchro.model import GitModule, Manifest, ManifestParseError

MANIFEST = """
basedir: /srv/modules
modules:
  - name: apache
    remote: https://example.com/org/apache.git
    ref: v1.2.0
  - name: nginx
    remote: https://example.com/org/nginx.git
    path: web/nginx
"""


class TestManifest:
    """Test parsing and validating manifests."""

    @pytest.mark.short
    def test_from_yaml(self):
        manifest = Manifest.from_yaml(MANIFEST)

        assert manifest.basedir == "/srv/modules"
        assert [m.name for m in manifest.modules] == ["apache", "nginx"]
        apache, nginx = manifest.modules
        assert apache.ref == "v1.2.0"
        assert apache.path is None
        assert nginx.ref == "HEAD"
        assert nginx.path == "web/nginx"

    @pytest.mark.short
    def test_empty_document(self):
        manifest = Manifest.from_yaml("")
        assert manifest.modules == []
        assert manifest.basedir == "modules"

    @pytest.mark.short
    @pytest.mark.parametrize(
        "entry",
        [
            "{name: '', remote: r}",
            "{name: a/b, remote: r}",
            "{name: '..', remote: r}",
            "{name: a, remote: '  '}",
            "{name: a, remote: r, ref: ''}",
            "{name: a}",
        ],
    )
    def test_invalid_module(self, entry):
        with pytest.raises(ManifestParseError):
            Manifest.from_yaml(f"modules:\n  - {entry}\n")

    @pytest.mark.short
    def test_duplicate_names(self):
        yaml_str = "modules:\n  - {name: a, remote: r1}\n  - {name: a, remote: r2}\n"
        with pytest.raises(ManifestParseError, match="Duplicate module names: a"):
            Manifest.from_yaml(yaml_str)

    @pytest.mark.short
    def test_invalid_yaml(self):
        with pytest.raises(ManifestParseError, match="Invalid YAML"):
            Manifest.from_yaml("modules: [unclosed")

    @pytest.mark.short
    def test_not_a_mapping(self):
        with pytest.raises(ManifestParseError, match="must be a mapping"):
            Manifest.from_yaml("- a\n- b\n")

    @pytest.mark.short
    def test_from_file_anchors_basedir(self, tmp_path):
        manifest_file = tmp_path / "site" / "synchro.yaml"
        manifest_file.parent.mkdir()
        manifest_file.write_text("modules:\n  - {name: a, remote: r}\n")

        manifest = Manifest.from_file(manifest_file)

        assert Path(manifest.basedir) == manifest_file.resolve().parent / "modules"

    @pytest.mark.short
    def test_from_file_error_names_file(self, tmp_path):
        manifest_file = tmp_path / "broken.yaml"
        manifest_file.write_text("modules: 3\n")

        with pytest.raises(ManifestParseError) as excinfo:
            Manifest.from_file(manifest_file)

        assert excinfo.value.manifest_file == manifest_file
        assert str(excinfo.value).startswith(f"{manifest_file}: ")

    @pytest.mark.short
    def test_select(self):
        manifest = Manifest.from_yaml(MANIFEST)
        assert [m.name for m in manifest.select()] == ["apache", "nginx"]
        assert [m.name for m in manifest.select(["nginx"])] == ["nginx"]
        with pytest.raises(KeyError):
            manifest.select(["nginx", "varnish"])


class TestGitModule:
    """Test the deployable modules built from a manifest."""

    @pytest.mark.short
    def test_paths(self):
        manifest = Manifest.from_yaml(MANIFEST)
        apache, nginx = manifest.git_modules(SynchroRegistry())

        assert apache.full_path == Path("/srv/modules/apache")
        assert nginx.full_path == Path("/srv/modules/web/nginx")
        assert nginx.remote == "https://example.com/org/nginx.git"

    @pytest.mark.short
    def test_sync_goes_through_registry(self):
        registry = MagicMock()
        registry.get_or_create.return_value.sync.return_value = "c" * 40
        module = GitModule(
            name="apache",
            remote="https://example.com/org/apache.git",
            ref="v1.2.0",
            full_path=Path("/srv/modules/apache"),
            registry=registry,
        )

        assert module.sync(update_cache=False) == "c" * 40

        registry.get_or_create.assert_called_once_with(
            "https://example.com/org/apache.git"
        )
        registry.get_or_create.return_value.sync.assert_called_once_with(
            Path("/srv/modules/apache"), "v1.2.0", update_cache=False
        )

    def test_modules_share_synchronizer(self, remote, registry, tmp_path):
        manifest = Manifest(
            basedir=str(tmp_path / "modules"),
            modules=[
                {"name": "stable", "remote": remote.url, "ref": "main"},
                {"name": "edge", "remote": remote.url, "ref": "feature"},
            ],
        )
        stable, edge = manifest.git_modules(registry)

        assert stable.sync() == remote.c1
        assert edge.sync() == remote.c2
        assert registry.remotes() == [remote.url]
        assert (tmp_path / "modules" / "edge" / "feature.txt").is_file()
        assert not (tmp_path / "modules" / "stable" / "feature.txt").exists()
