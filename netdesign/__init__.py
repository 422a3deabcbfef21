"""Network design assistant: topology generator, conversation tracker and exports."""

__version__ = "0.1.0"
