"""
credstore: in-memory credential store with an interactive shell.

This package keeps user records (username, password, permission list) in
insertion order and answers authentication and authorization queries
against them. Nothing is persisted; a store lives for one session.
"""

__version__ = "1.0.0"
