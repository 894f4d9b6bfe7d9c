"""
Application layer

Use cases that tie the domain to storage and handlers: condition
evaluation, rule matching, action dispatch, the automation engine,
rule management, template installation and runtime wiring.
"""
