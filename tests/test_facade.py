"""
Tests for layerforge.facade - LayerForge Top-Level Facade
===========================================================

What's Being Tested:
    - Wiring from configuration (installer kind, backend, bucket)
    - Injected collaborators take precedence over config
    - build_layer() and handle_event() through the full pipeline

All tests use in-memory implementations, no AWS and no npm.
"""

import json

from layerforge.core.config import LayerForgeConfig
from layerforge.facade import LayerForge
from layerforge.integrations.installer.mock import MockPackageInstaller
from layerforge.integrations.installer.npm import NpmInstaller
from layerforge.integrations.registry.memory import InMemoryLayerRegistry
from layerforge.integrations.storage.memory import InMemoryBlobStore


# =============================================================================
# Tests: Construction
# =============================================================================
class TestConstruction:
    """Collaborators are built from config unless injected."""

    def test_memory_backend(self, config) -> None:
        forge = LayerForge(config)

        assert isinstance(forge.installer, MockPackageInstaller)
        assert isinstance(forge.blob_store, InMemoryBlobStore)
        assert isinstance(forge.registry, InMemoryLayerRegistry)
        assert forge.config is config

    def test_npm_installer_from_config(self, tmp_path) -> None:
        config = LayerForgeConfig(backend="memory", workspace_dir=tmp_path)
        assert isinstance(LayerForge(config).installer, NpmInstaller)

    def test_injected_collaborators(self, config) -> None:
        installer = MockPackageInstaller()
        store = InMemoryBlobStore()
        forge = LayerForge(config, installer=installer, blob_store=store)

        assert forge.installer is installer
        assert forge.blob_store is store

    def test_repr(self, config) -> None:
        text = repr(LayerForge(config))
        assert "test-bucket" in text
        assert "memory" in text
        assert "mock" in text


# =============================================================================
# Tests: Operations
# =============================================================================
class TestOperations:
    """Running builds through the facade."""

    async def test_build_layer(self, config) -> None:
        forge = LayerForge(config)

        result = await forge.build_layer({"packages": "lodash", "layerName": "test-layer"})

        assert result.succeeded
        assert forge.blob_store.keys("test-bucket") == ["layers/test-layer.zip"]
        assert forge.installer.installed_specs == ["lodash"]

    async def test_handle_event_success(self, config) -> None:
        forge = LayerForge(config)

        response = await forge.handle_event({"packages": "lodash", "layerName": "test-layer"})

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["message"] == "Lambda Layer created successfully"
        assert body["layerVersion"] == 1

    async def test_handle_event_failure(self, config) -> None:
        response = await LayerForge(config).handle_event({"layerName": "test-layer"})

        assert response["statusCode"] == 500
        assert json.loads(response["body"])["error"] == "Internal Server Error"

    async def test_distinguish_client_errors_from_config(self, tmp_path) -> None:
        config = LayerForgeConfig(
            backend="memory",
            workspace_dir=tmp_path,
            installer={"kind": "mock"},
            distinguish_client_errors=True,
        )
        response = await LayerForge(config).handle_event({"packages": ""})
        assert response["statusCode"] == 400

    async def test_size_limit_from_config(self, tmp_path) -> None:
        config = LayerForgeConfig(
            backend="memory",
            workspace_dir=tmp_path,
            installer={"kind": "mock"},
            archive={"max_unzipped_bytes": 16},
        )
        result = await LayerForge(config).build_layer({"packages": "lodash", "layerName": "x"})
        assert result.error.error_code == "LAYER_TOO_LARGE"
