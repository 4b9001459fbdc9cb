"""jswitch — keep several Java runtimes installed, make one of them active."""

__version__ = "0.1.0"
