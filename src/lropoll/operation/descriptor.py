"""Decode hook records for long-running methods."""
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type
from pydantic import BaseModel

Decoder = Callable[[bytes], Any]


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Decode hooks for one long-running method.

    Passed explicitly wherever a handle is created; there is no global
    registry. A missing hook keeps the raw bytes.
    """

    method: str
    decode_result: Optional[Decoder] = None
    decode_metadata: Optional[Decoder] = None


def pydantic_decoder(model: Type[BaseModel]) -> Decoder:
    """
    Build a decode hook that parses JSON bytes into a pydantic model.

    Args:
        model: Pydantic model class

    Returns:
        Decoder: Function bytes -> model instance

    Example:
        >>> descriptor = OperationDescriptor(
        >>>     "createInstance",
        >>>     decode_result=pydantic_decoder(Instance),
        >>>     decode_metadata=pydantic_decoder(OperationMetadata),
        >>> )
    """

    def decode(raw: bytes) -> BaseModel:
        return model.model_validate_json(raw)

    decode.__name__ = f"decode_{model.__name__}"
    return decode
