"""Persistence layer: ORM models, mappers, repositories and unit of work."""

from .uow import UnitOfWork, create_uow

__all__ = ["UnitOfWork", "create_uow"]
