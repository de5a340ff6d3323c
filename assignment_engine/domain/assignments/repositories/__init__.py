from .assignment_repository import AssignmentRepository, InMemoryAssignmentRepository

__all__ = ["AssignmentRepository", "InMemoryAssignmentRepository"]
