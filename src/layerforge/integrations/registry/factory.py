"""
layerforge.integrations.registry.factory - Layer Registry Factory
===================================================================
"""

from __future__ import annotations

from layerforge.core.config import LayerForgeConfig
from layerforge.core.enums import Backend
from layerforge.integrations.registry.base import LayerRegistry


def create_layer_registry(config: LayerForgeConfig) -> LayerRegistry:
    """Create the layer registry for the configured backend.

        - Backend.AWS    → LambdaLayerRegistry in ``config.region``
        - Backend.MEMORY → InMemoryLayerRegistry
    """
    if config.backend == Backend.MEMORY:
        from layerforge.integrations.registry.memory import InMemoryLayerRegistry
        return InMemoryLayerRegistry(region=config.region or "us-east-1")

    from layerforge.integrations.registry.lambda_registry import LambdaLayerRegistry
    return LambdaLayerRegistry(region=config.region)
