from .base_share_client import BaseShareClient
from .azure_share_client import AzureFileShareClient

__all__ = ["BaseShareClient", "AzureFileShareClient"]
