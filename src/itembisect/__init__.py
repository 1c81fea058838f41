"""itembisect - interactive bisection over an ordered list of items."""

__version__ = "0.1.0"
