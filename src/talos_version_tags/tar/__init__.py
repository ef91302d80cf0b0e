"""Image layer archive handling."""

from .models import LayerDescriptor
from .reader import LayerReader

__all__ = ["LayerDescriptor", "LayerReader"]
