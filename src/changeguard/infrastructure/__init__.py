"""
Infrastructure layer for the change-request pipeline.

Contains adapters for external concerns (persistence, worker processes,
schema tooling, HTTP services).
"""
