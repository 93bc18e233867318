"""pagecut - polygon region capture and page recomposition for rasterized documents."""

__version__ = "0.1.0"
