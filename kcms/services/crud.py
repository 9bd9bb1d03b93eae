"""Generic CRUD service with audit logging and validation."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Type, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kcms.extensions import db
from kcms.labels import message
from kcms.services.audit import log_action

Model = TypeVar("Model", bound=db.Model)

PROTECTED_FIELDS = ('id', 'created_at', 'updated_at')


class CRUDService:
    """Base CRUD service with common operations."""

    def __init__(self, model: Type[Model]):
        """
        Initialize CRUD service.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model
        self.model_name = model.__tablename__

    def create(self, data: dict[str, Any], user: Any = None, skip_log: bool = False) -> tuple[Model | None, str | None]:
        """
        Create a new record.

        Args:
            data: Dictionary of field values
            user: Profile performing the action (for logging)
            skip_log: Skip audit logging

        Returns:
            (created_object, error_message)
        """
        try:
            error = self._validate_create(data)
            if error:
                return None, error

            instance = self.model(**data)
            db.session.add(instance)
            db.session.commit()

        except IntegrityError as e:
            db.session.rollback()
            return None, self._handle_integrity_error(e)

        except (SQLAlchemyError, PermissionError) as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to create {self.model_name}: {e}")
            return None, message('save_failed')

        if not skip_log and user:
            log_action(
                user,
                f"{self.model_name}_created",
                self.model_name,
                instance.id,
                metadata={'data': self._sanitize_log_data(data)}
            )
        return instance, None

    def get_by_id(self, object_id: str) -> Model | None:
        """Get record by ID (access-scoped)."""
        from kcms.blueprints.common.access import scoped_query
        return scoped_query(self.model).filter_by(id=object_id).first()

    def list_all(self, filters: dict[str, Any] | None = None, order_by: Any = None, options: tuple = ()) -> list[Model]:
        """
        List all records visible to the current role, newest first by default.

        Args:
            filters: Additional equality filter criteria
            order_by: SQLAlchemy order_by clause
            options: Loader options (e.g. joinedload) applied to the query

        Returns:
            List of model instances
        """
        from kcms.blueprints.common.access import scoped_query
        query = scoped_query(self.model)

        if options:
            query = query.options(*options)

        if filters:
            query = query.filter_by(**filters)

        if order_by is None:
            order_by = self.model.created_at.desc()

        return query.order_by(order_by).all()

    def update(self, object_id: str, data: dict[str, Any], user: Any = None, skip_log: bool = False) -> tuple[bool, str | None]:
        """
        Update a record.

        Args:
            object_id: ID of object to update
            data: Dictionary of fields to update
            user: Profile performing the action (for logging)
            skip_log: Skip audit logging

        Returns:
            (success, error_message)
        """
        try:
            instance = self.get_by_id(object_id)
            if not instance:
                return False, message('not_found')

            error = self._validate_update(instance, data)
            if error:
                return False, error

            for key, value in data.items():
                if hasattr(instance, key) and key not in PROTECTED_FIELDS:
                    setattr(instance, key, value)

            db.session.commit()

        except IntegrityError as e:
            db.session.rollback()
            return False, self._handle_integrity_error(e)

        except (SQLAlchemyError, PermissionError) as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update {self.model_name}: {e}")
            return False, message('save_failed')

        if not skip_log and user:
            log_action(
                user,
                f"{self.model_name}_updated",
                self.model_name,
                object_id,
                metadata={'data': self._sanitize_log_data(data)}
            )
        return True, None

    def delete(self, object_id: str, user: Any = None, skip_log: bool = False) -> tuple[bool, str | None]:
        """
        Delete exactly one record. Rows referencing it are left untouched.

        Args:
            object_id: ID of object to delete
            user: Profile performing the action (for logging)
            skip_log: Skip audit logging

        Returns:
            (success, error_message)
        """
        try:
            instance = self.get_by_id(object_id)
            if not instance:
                return False, message('not_found')

            db.session.delete(instance)
            db.session.commit()

        except (SQLAlchemyError, PermissionError) as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete {self.model_name}: {e}")
            return False, message('delete_failed')

        if not skip_log and user:
            log_action(
                user,
                f"{self.model_name}_deleted",
                self.model_name,
                object_id
            )
        return True, None

    def _validate_create(self, data: dict[str, Any]) -> str | None:
        """
        Validate data for creation.
        Override in subclasses for model-specific validation.
        """
        return None

    def _validate_update(self, instance: Model, data: dict[str, Any]) -> str | None:
        """
        Validate data for update.
        Override in subclasses for model-specific validation.
        """
        return None

    def _handle_integrity_error(self, error: IntegrityError) -> str:
        """Convert database integrity errors to user-facing messages."""
        error_msg = str(error).lower()
        if 'unique' in error_msg:
            return message('already_exists')
        return message('save_failed')

    def _sanitize_log_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Remove sensitive fields and make values JSON-friendly."""
        sensitive_fields = {'password', 'password_hash', 'secret', 'token'}
        clean = {}
        for key, value in data.items():
            if key in sensitive_fields:
                continue
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            clean[key] = value
        return clean


__all__ = ['CRUDService']
