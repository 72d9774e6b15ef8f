"""
Contract - interface catalogs, ABI encoding/decoding and read-only calls.

Uses eth-abi for the ABI layout and eth-hash for Keccak-256 selectors.
"""
