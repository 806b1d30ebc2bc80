"""
layerforge.integrations.registry - Layer Registry Adapters
============================================================

    - LayerRegistry (ABC):     publish_version(...) -> LayerVersion
    - LambdaLayerRegistry:     AWS Lambda PublishLayerVersion via boto3
    - InMemoryLayerRegistry:   per-name version counter, for tests
    - create_layer_registry:   picks one from LayerForgeConfig.backend
"""

from layerforge.integrations.registry.base import LayerRegistry
from layerforge.integrations.registry.factory import create_layer_registry
from layerforge.integrations.registry.lambda_registry import LambdaLayerRegistry
from layerforge.integrations.registry.memory import InMemoryLayerRegistry

__all__ = [
    "LayerRegistry",
    "LambdaLayerRegistry",
    "InMemoryLayerRegistry",
    "create_layer_registry",
]
