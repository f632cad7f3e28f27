"""
Core - Shared infrastructure for Mano-Pro

This package provides the building blocks shared by every app:
- Base model with UUID primary key and timestamps
- Forward-only status lifecycles
- camelCase renderer/parser pair for the JSON API
- Role and participant permissions
- Secure base viewsets with audit logging
- Upload storage and text sanitization helpers
"""
