from ringrules.infrastructure.integrations.in_memory_outbox import InMemoryOutbox, OutboxRecord

__all__ = ["InMemoryOutbox", "OutboxRecord"]
