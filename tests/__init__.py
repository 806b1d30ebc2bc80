"""
LayerForge Test Suite
=====================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for layerforge.core (config, models, exceptions)
    ├── test_infrastructure/→ Tests for layerforge.infrastructure (workspace, archive)
    ├── test_integrations/  → Tests for layerforge.integrations (installer, storage, registry)
    ├── test_orchestration/ → Tests for layerforge.orchestration (publisher, pipeline)
    ├── test_integration/   → End-to-end tests with a fake installer executable
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                            # Run all tests
    pytest tests/test_orchestration/  # Run only pipeline tests
"""
