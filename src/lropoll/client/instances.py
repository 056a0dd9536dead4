"""Cache instance client: CRUD and failover calls over an RPC invoker."""
import logging
from typing import List, Optional, Union
from lropoll.client.models import Instance, ListInstancesResponse, OperationMetadata
from lropoll.client.operations import OperationsClient
from lropoll.client.protocol import RpcInvoker
from lropoll.core.enums import DataProtectionMode
from lropoll.operation.descriptor import OperationDescriptor, pydantic_decoder
from lropoll.operation.handle import Operation

logger = logging.getLogger(__name__)

# Decode hooks per long-running method
CREATE_INSTANCE = OperationDescriptor(
    "createInstance",
    decode_result=pydantic_decoder(Instance),
    decode_metadata=pydantic_decoder(OperationMetadata),
)
UPDATE_INSTANCE = OperationDescriptor(
    "updateInstance",
    decode_result=pydantic_decoder(Instance),
    decode_metadata=pydantic_decoder(OperationMetadata),
)
DELETE_INSTANCE = OperationDescriptor(
    "deleteInstance",
    decode_result=None,  # Empty response
    decode_metadata=pydantic_decoder(OperationMetadata),
)
FAILOVER_INSTANCE = OperationDescriptor(
    "failoverInstance",
    decode_result=pydantic_decoder(Instance),
    decode_metadata=pydantic_decoder(OperationMetadata),
)


def location_path(project: str, location: str) -> str:
    """Return a fully-qualified location resource name."""
    return f"projects/{project}/locations/{location}"


def instance_path(project: str, location: str, instance: str) -> str:
    """Return a fully-qualified instance resource name."""
    return f"projects/{project}/locations/{location}/instances/{instance}"


class CacheInstanceClient:
    """
    Client for the cache instance service.

    list_instances and get_instance return payloads directly; the other calls
    start long-running operations and return handles to await.
    """

    def __init__(
        self,
        invoker: RpcInvoker,
        operations: Optional[OperationsClient] = None,
    ):
        """
        Initialize cache instance client.

        Args:
            invoker: RPC invoker used for every call
            operations: Operations client (built on the same invoker if not provided)
        """
        self.invoker = invoker
        self.operations = operations or OperationsClient(invoker)

    async def list_instances(self, parent: str, page_size: Optional[int] = None) -> List[Instance]:
        """
        List all instances in a location, following page tokens.

        Args:
            parent: Location resource name
            page_size: Optional page size hint

        Returns:
            List[Instance]: Instances across all pages
        """
        instances: List[Instance] = []
        page_token = ""
        while True:
            request = {"parent": parent}
            if page_size:
                request["pageSize"] = page_size
            if page_token:
                request["pageToken"] = page_token

            page = ListInstancesResponse.model_validate(
                await self.invoker.invoke("listInstances", request)
            )
            instances.extend(page.instances)
            if page.unreachable:
                logger.warning(f"Unreachable locations: {', '.join(page.unreachable)}")

            page_token = page.next_page_token
            if not page_token:
                return instances

    async def get_instance(self, name: str) -> Instance:
        """Get one instance by resource name."""
        data = await self.invoker.invoke("getInstance", {"name": name})
        return Instance.model_validate(data)

    async def create_instance(self, parent: str, instance_id: str, instance: Instance) -> Operation:
        """
        Start creating an instance.

        Args:
            parent: Location resource name
            instance_id: Id of the new instance within the location
            instance: Instance settings

        Returns:
            Operation: Handle resolving to the created Instance
        """
        request = {
            "parent": parent,
            "instanceId": instance_id,
            "instance": instance.to_wire(),
        }
        return await self._start(CREATE_INSTANCE, request)

    async def update_instance(self, update_mask: List[str], instance: Instance) -> Operation:
        """
        Start updating the fields of an instance named in update_mask.

        Returns:
            Operation: Handle resolving to the updated Instance
        """
        request = {
            "updateMask": {"paths": list(update_mask)},
            "instance": instance.to_wire(),
        }
        return await self._start(UPDATE_INSTANCE, request)

    async def delete_instance(self, name: str) -> Operation:
        """Start deleting an instance. The handle resolves to None."""
        return await self._start(DELETE_INSTANCE, {"name": name})

    async def failover_instance(
        self,
        name: str,
        data_protection_mode: Union[DataProtectionMode, str] = DataProtectionMode.DATA_PROTECTION_MODE_UNSPECIFIED,
    ) -> Operation:
        """
        Start a failover of a replicated instance to its replica node.

        Returns:
            Operation: Handle resolving to the Instance after failover
        """
        request = {
            "name": name,
            "dataProtectionMode": str(DataProtectionMode(data_protection_mode)),
        }
        return await self._start(FAILOVER_INSTANCE, request)

    async def _start(self, descriptor: OperationDescriptor, request: dict) -> Operation:
        envelope = await self.invoker.invoke(descriptor.method, request)
        operation = self.operations.bind(envelope, descriptor)
        logger.info(f"{descriptor.method} started operation {operation.operation_id}")
        return operation
