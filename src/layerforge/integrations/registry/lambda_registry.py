"""
layerforge.integrations.registry.lambda_registry - AWS Lambda Layers
======================================================================

LayerRegistry backed by ``lambda:PublishLayerVersion``. The version content
is read by Lambda straight from S3, so nothing is uploaded here; the call
only references the object the publisher stored.

Lambda enforces the layer size ceiling at this point. An archive that is too
large is rejected here even though its upload succeeded.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Sequence

import boto3
import structlog

from layerforge.core.models import LayerVersion
from layerforge.integrations.registry.base import LayerRegistry


logger = structlog.get_logger()


class LambdaLayerRegistry(LayerRegistry):
    """LayerRegistry that publishes AWS Lambda layer versions.

    Attributes:
        _client: A boto3 Lambda client. Built from ``region`` when not
            given; tests pass a stubbed client.
    """

    def __init__(self, client: Optional[Any] = None, region: Optional[str] = None) -> None:
        self._client = client or boto3.client("lambda", region_name=region)
        self._logger = logger.bind(component="lambda_layer_registry")

    @property
    def client(self) -> Any:
        return self._client

    async def publish_version(
        self,
        layer_name: str,
        description: str,
        bucket: str,
        key: str,
        compatible_runtimes: Sequence[str],
        compatible_architectures: Sequence[str],
    ) -> LayerVersion:
        response = await asyncio.to_thread(
            self._client.publish_layer_version,
            LayerName=layer_name,
            Description=description,
            Content={"S3Bucket": bucket, "S3Key": key},
            CompatibleRuntimes=list(compatible_runtimes),
            CompatibleArchitectures=list(compatible_architectures),
        )
        self._logger.debug(
            "lambda_publish_layer_version",
            layer_name=layer_name,
            version=response.get("Version"),
        )
        return LayerVersion(
            layer_name=layer_name,
            description=response.get("Description", description),
            bucket=bucket,
            key=key,
            compatible_runtimes=response.get("CompatibleRuntimes", list(compatible_runtimes)),
            compatible_architectures=response.get(
                "CompatibleArchitectures", list(compatible_architectures)
            ),
            layer_arn=response["LayerArn"],
            layer_version_arn=response["LayerVersionArn"],
            version=response["Version"],
        )
