"""Spark lending deployments (Aave V3 fork, mainnet only)."""
from ...config import ChainId
from ..aave_v3.addresses import AaveDeployment

SPARK_ADDRESSES: dict[ChainId, AaveDeployment] = {
    1: AaveDeployment(
        pool="0xC13e21B648A5Ee794902342038FF3aDAB66BE987",
        data_provider="0xFc21d6d146E6086B8359705C8b28512a983db0cb",
    ),
}
