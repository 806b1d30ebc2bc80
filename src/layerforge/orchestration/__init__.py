"""
layerforge.orchestration - Pipeline Orchestration Layer
=========================================================

    - ArtifactPublisher: upload the archive, register the layer version
    - LayerPipeline:     sequence every stage and shape the result

Usage:
    from layerforge.orchestration import ArtifactPublisher, LayerPipeline
"""

from layerforge.orchestration.pipeline import LayerPipeline
from layerforge.orchestration.publisher import ArtifactPublisher, describe_layer

__all__ = [
    "ArtifactPublisher",
    "LayerPipeline",
    "describe_layer",
]
