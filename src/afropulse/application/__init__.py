"""Application layer: source adapters and aggregation services."""
