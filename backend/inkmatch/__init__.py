"""inkmatch backend: profile discovery for tattoo artists and studios."""

__version__ = "1.0.0"
