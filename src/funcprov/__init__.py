"""
Function Provider Package (funcprov)

Resolves function identifiers to functions through composable providers.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - What the functions do
    - Where function implementations come from
    - How canonical tokens are fetched

This package defines NAMING and RESOLUTION only.

Leaf providers hold functions.
Views (aliasing, filtering, renaming) and the aggregating provider
only translate names and forward to the provider they wrap.
"""

__version__ = "0.1.0"
