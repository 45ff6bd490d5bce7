"""Application layer: use cases orchestrating the domain policy and ports."""
