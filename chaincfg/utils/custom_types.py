from types import MappingProxyType
from typing import Annotated, Any, Dict, Literal, TypeVar, Union

from pydantic import AfterValidator, BeforeValidator, WrapSerializer

ANY_NETWORK = "*"

K = TypeVar("K")
V = TypeVar("V")


HexInt = Annotated[
    int,
    BeforeValidator(
        lambda x: int(x, 16) if isinstance(x, str) and x.startswith("0x") else x
    ),
]


def _coerce_network_id(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if value == ANY_NETWORK:
            return value
        if value.lower().startswith("0x"):
            return int(value, 16)
        if value.isdigit():
            return int(value)
    return value


# An integer chain id, or "*" to match whatever the endpoint reports.
NetworkId = Annotated[
    Union[int, Literal["*"]],
    BeforeValidator(_coerce_network_id),
]


# Read-only mapping; serialized as a plain dict.
FrozenDict = Annotated[
    Dict[K, V],
    AfterValidator(MappingProxyType),
    WrapSerializer(lambda value, handler: handler(dict(value))),
]
