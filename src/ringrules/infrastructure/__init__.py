"""Infrastructure adapters: file persistence, action handlers, integrations and the scheduler."""
