"""
Wire - JSON-RPC 2.0 envelope schemas and JSON value helpers.
"""
