"""VentureScope: multi-tenant due-diligence backend."""

__version__ = "1.0.0"
