"""RepForge: completion ledger and training progression service."""
