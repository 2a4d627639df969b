"""Domain layer — definitions, capabilities, composition, errors.

This layer depends only on stdlib and pydantic.
It must never import from core, backends, plugins, or config.
"""
