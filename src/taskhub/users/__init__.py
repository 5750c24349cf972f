"""
User subsystem.

Components:
- user_models.py: User, UserRole and field normalization
- user_updates.py: explicit field changes accepted by the repository
- user_repository.py: in-memory index with uniqueness checks and write-through persistence
- user_controller.py: registration, simulated login and profile operations
"""
