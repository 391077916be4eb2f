"""
Entrypoint registry module.

Named, independently priced operations and their dispatch pipeline.
"""
from .models import CallResult, EntrypointDefinition
from .registry import EntrypointRegistry

__all__ = ["CallResult", "EntrypointDefinition", "EntrypointRegistry"]
