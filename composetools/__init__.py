"""Progress events and writers, log printing, line splitting, prompts and end-to-end test helpers for compose tooling."""

__version__ = "0.1.0"