"""
taskhub: task tracking engine.

Layers (leaves first): storage -> users/tasks models -> repositories -> controllers -> cli.
"""

__version__ = "2.0.0"
