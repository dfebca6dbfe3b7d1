"""Invoice computation and rendering stages."""

from .number_coercion import coerce_number

__all__ = ["coerce_number"]
