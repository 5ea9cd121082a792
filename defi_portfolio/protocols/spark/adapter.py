"""Spark lending adapter."""
from __future__ import annotations

from ...models import ProtocolInfo
from ..aave_v3.adapter import AaveV3Adapter
from .addresses import SPARK_ADDRESSES


class SparkAdapter(AaveV3Adapter):
    protocol = ProtocolInfo(
        id="spark",
        name="Spark",
        category="lending",
        website="https://spark.fi",
    )
    deployments = SPARK_ADDRESSES
    supported_chains = frozenset(SPARK_ADDRESSES)
