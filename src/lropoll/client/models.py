"""Cache instance service payloads."""
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for payloads exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to a camelCase JSON-compatible dict, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Instance(WireModel):
    """A managed cache instance."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    location_id: Optional[str] = None
    alternative_location_id: Optional[str] = None
    redis_version: Optional[str] = None
    reserved_ip_range: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    current_location_id: Optional[str] = None
    create_time: Optional[datetime] = None
    state: Optional[str] = None
    status_message: Optional[str] = None
    tier: Optional[str] = None
    memory_size_gb: Optional[int] = None
    authorized_network: Optional[str] = None


class OperationMetadata(WireModel):
    """Progress metadata reported while an instance operation runs."""

    create_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    target: Optional[str] = None
    verb: Optional[str] = None
    status_detail: Optional[str] = None
    cancel_requested: bool = False
    api_version: Optional[str] = None


class ListInstancesResponse(WireModel):
    """One page of listInstances results."""

    instances: List[Instance] = Field(default_factory=list)
    next_page_token: str = ""
    unreachable: List[str] = Field(default_factory=list)
