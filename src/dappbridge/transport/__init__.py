"""
Transport - JSON-RPC 2.0 client for Ethereum-compatible nodes.

Uses httpx; one POST per call, ids owned by each RpcTransport instance.
"""
