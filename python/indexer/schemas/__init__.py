"""Pydantic schemas for the indexer.

- events: typed payloads of the ledger storage-module events
- patches: presence-aware field patches applied through the merge store
"""
