"""Operations client: status, cancel and delete calls for long-running operations."""
import logging
from typing import Any, Dict
from lropoll.client.protocol import RpcInvoker
from lropoll.operation.descriptor import OperationDescriptor
from lropoll.operation.handle import Operation
from lropoll.operation.models import RawStatus

logger = logging.getLogger(__name__)


class OperationsClient:
    """
    Calls the remote operations service through an RPC invoker.

    get_operation and cancel_operation are the status fetcher and canceller
    bound into handles created by bind().
    """

    def __init__(self, invoker: RpcInvoker):
        self.invoker = invoker

    async def get_operation(self, name: str) -> RawStatus:
        """
        Fetch the latest raw status of an operation.

        Args:
            name: Operation name

        Returns:
            RawStatus: Undecoded status

        Raises:
            RpcError: If the call fails
        """
        data = await self.invoker.invoke("getOperation", {"name": name})
        return RawStatus.from_wire(data)

    async def cancel_operation(self, name: str) -> None:
        """Ask the service to cancel an operation (best effort)."""
        await self.invoker.invoke("cancelOperation", {"name": name})

    async def delete_operation(self, name: str) -> None:
        """Tell the service the operation result is no longer needed. Does not cancel."""
        await self.invoker.invoke("deleteOperation", {"name": name})

    def bind(self, envelope: Dict[str, Any], descriptor: OperationDescriptor) -> Operation:
        """
        Create a handle from the operation envelope returned by a long-running call.

        Args:
            envelope: {"name", "done", "metadata", "response", "error"}
            descriptor: Decode hooks of the method that started the operation

        Returns:
            Operation: Handle with this client's fetcher and canceller bound
        """
        name = envelope.get("name", "")
        logger.debug(f"{descriptor.method} started operation {name}")
        return Operation.from_raw(
            name,
            RawStatus.from_wire(envelope),
            descriptor,
            fetcher=self.get_operation,
            canceller=self.cancel_operation,
        )
