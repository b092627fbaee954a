"""State layer.

This package is the single source of truth for how a polled handshake
snapshot is reconciled against the durable ledger, and for how that ledger
is persisted between runs.
"""
