"""OpenSIPS management interface (MI) over JSON-RPC/HTTP."""

from mi.client import MIClient, subscription_socket
from mi.errors import MIError, MIProtocolError, MIRequestError, MIResponseError

__all__ = [
    "MIClient",
    "MIError",
    "MIProtocolError",
    "MIRequestError",
    "MIResponseError",
    "subscription_socket",
]
