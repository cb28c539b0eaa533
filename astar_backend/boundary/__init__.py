"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, attachment storage, identity provider).
Provides adapters and clients for infrastructure dependencies.
"""
