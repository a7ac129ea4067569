"""
cosmosrest: Azure Cosmos DB REST client

Master key signing, request dispatch, pagination and precondition retry
for the Cosmos DB SQL API.
"""

__version__ = "0.1.0"

from .client import CosmosClient

__all__ = ["CosmosClient", "__version__"]
