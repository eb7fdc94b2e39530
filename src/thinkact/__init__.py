"""thinkact: a structured-output ReAct agent loop."""

__version__ = "0.1.0"
