"""
Shared models for the Level backend.

- ``domain``: enums describing the lifecycle states used across entities,
  services and the GraphQL schema.
- ``io``: Pydantic input schemas validated by services before any write.
"""
