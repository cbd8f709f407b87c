"""Storage indexer: projects ledger storage events into bucket and object records."""
