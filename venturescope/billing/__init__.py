"""Plan catalog, usage accounting, and payment provider integration."""
