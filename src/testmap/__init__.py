"""testmap - attribute CI tests to the components that own them."""

__version__ = "0.1.0"
