"""
Models package - Pydantic models for type-safe pod and config handling.

Defines data models for:
- Pods, containers and volumes as seen by the admission webhook
- The static mutation configuration
"""
