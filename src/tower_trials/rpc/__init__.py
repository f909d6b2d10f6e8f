"""Backend RPC access: the transport protocol and the httpx client."""

from tower_trials.rpc.client import RPC_PATH, HttpRpcClient
from tower_trials.rpc.transport import RpcTransport

__all__ = ["RpcTransport", "HttpRpcClient", "RPC_PATH"]
