"""ringrules - automation rule engine and job scheduler for AI phone answering."""

__version__ = "1.0.0"
