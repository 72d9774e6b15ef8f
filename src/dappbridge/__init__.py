__all__ = [
    # Facade
    "ChainFacade",
    "NetworkInfo",
    "AccountInfo",
    "TransactionDetails",
    "TokenMetadata",
    # Core
    "RpcTransport",
    "ContractBridge",
    "Catalog",
    "CatalogEntry",
    "TypeTag",
    "encode_call",
    "decode_result",
    # Config
    "BridgeConfig",
    "load_config",
    # Errors
    "BridgeError",
    "TransportFailure",
    "InvalidResponse",
    "RpcError",
    "UnknownFunction",
    "EncodeError",
    "DecodeError",
    "CatalogError",
    # Quantities
    "to_quantity",
    "from_quantity",
]

from .config import BridgeConfig, load_config
from .contract.bridge import ContractBridge, TokenMetadata
from .contract.catalog import Catalog, CatalogEntry, TypeTag
from .contract.codec import decode_result, encode_call
from .errors import (
    BridgeError,
    CatalogError,
    DecodeError,
    EncodeError,
    InvalidResponse,
    RpcError,
    TransportFailure,
    UnknownFunction,
)
from .facade import AccountInfo, ChainFacade, NetworkInfo, TransactionDetails
from .transport.rpc import RpcTransport
from .utils import from_quantity, to_quantity
