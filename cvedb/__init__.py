"""Client library for the Cvedb workflow API: account, run and library access, workflow input editing and text rendering."""

__version__ = "2.0.0"

__all__ = ["__version__"]