"""JCI Connect - meeting booking and schedule dashboard."""

__version__ = "0.1.0"
