"""
Task subsystem.

Components:
- task_models.py: data structures (Task, CommandName, command results)
- commands.py: command schema and payload decoding
- relevance.py: on-deck / loose-end predicates
- pending.py: optimistic projection of in-flight commands
- views.py: ordering and hidden-row projection of the two lists
- dispatch.py: executes decoded commands against the store
- stats.py: completion stats
- task_store.py: SQLite-backed storage
"""
