"""Azure Files implementation of the remote share client."""

import logging
from typing import Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.fileshare.aio import ShareServiceClient

from .base_share_client import BaseShareClient
from ...core.exceptions import RemoteShareError


def build_account_url(account_name: str, storage_base: str) -> str:
    return f"https://{account_name}.file.{storage_base}"


class AzureFileShareClient(BaseShareClient):
    """Provisions and deletes Azure file shares using the async SDK client."""

    def __init__(
        self,
        account_name: str,
        account_key: str,
        storage_base: str = "core.windows.net",
        service_client: Optional[ShareServiceClient] = None,
    ):
        self._account_name = account_name
        self._service_client = service_client or ShareServiceClient(
            account_url=build_account_url(account_name, storage_base),
            credential={"account_name": account_name, "account_key": account_key},
        )

    async def create_share_if_not_exists(self, share: str) -> bool:
        share_client = self._service_client.get_share_client(share)
        try:
            await share_client.create_share()
        except ResourceExistsError:
            logging.debug(f"Azure file share {share!r} already exists")
            return False
        except AzureError as e:
            raise RemoteShareError(f"error creating azure file share: {e}") from e
        return True

    async def delete_share_if_exists(self, share: str) -> bool:
        share_client = self._service_client.get_share_client(share)
        try:
            await share_client.delete_share()
        except ResourceNotFoundError:
            logging.debug(f"Azure file share {share!r} already absent")
            return False
        except AzureError as e:
            raise RemoteShareError(f"error removing azure file share {share!r}: {e}") from e
        return True

    async def close(self) -> None:
        await self._service_client.close()
