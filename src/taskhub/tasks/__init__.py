"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskNote, Category, Priority, TaskStatus)
- task_updates.py: explicit field changes accepted by the repository
- task_queries.py: filter criteria, sort keys and stats value types
- task_repository.py: in-memory index with write-through persistence and the query surface
- task_controller.py: access-controlled operations returning Result envelopes
"""
