"""Task tracking module for dataflow.

This module provides a simple task tracking service that keeps the
lifecycles of suspended actions alive and allows waiting for them.
"""

from .service import TaskService, TaskServiceImpl

__all__ = ["TaskService", "TaskServiceImpl"]
