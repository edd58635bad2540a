"""Print layout designer: document model, editing engine and output compilers."""

__version__ = "1.0.0"
