"""
Commands - CLI command implementations for dappbridge.

- chain:    network, account, balance, tx, block, accounts, code, storage,
            estimate-gas, send
- contract: call, encode, decode, token, token-balance
- dev:      development node utilities (impersonation, mining, snapshots)
"""
