"""Application layer: DTOs, use cases and service wiring."""
