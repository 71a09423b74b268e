from collections.abc import Callable
import functools
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import DatabaseError

logger = logging.getLogger(__name__)

AsyncFunc = Callable[..., Any]


def handle_db_errors(entity_name: str = ""):
    """Decorator translating store failures into ``DatabaseError``.

    Failures are logged and re-raised at once; nothing is retried.

    Args:
        entity_name: Entity name for logging
    """

    def decorator(func: AsyncFunc) -> AsyncFunc:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_name = getattr(func, "__name__", str(func))
            log_prefix = f"{entity_name} " if entity_name else ""

            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                entity_info = _extract_entity_info(func_name, args, kwargs)
                logger.error(f"Database error while {log_prefix}{func_name} {entity_info}: {e}")
                raise DatabaseError(message="Database failure") from e
            except OSError as e:
                # Drivers may surface an unreachable server before SQLAlchemy wraps it
                entity_info = _extract_entity_info(func_name, args, kwargs)
                logger.error(f"Store unreachable while {log_prefix}{func_name} {entity_info}: {e}")
                raise DatabaseError(message="Database unavailable") from e

        return wrapper

    return decorator


def _extract_entity_info(func_name: str, args: tuple, kwargs: dict) -> str:
    """Extracts entity information from function arguments for logging.

    Tries to find an entity ID or other information in the arguments
    to create more informative log messages.
    """
    # Skip the first argument (the repository instance)
    if len(args) > 1 and isinstance(args[1], int | str):
        return str(args[1])

    for key in ["id", "post_id"]:
        if key in kwargs:
            return f"{key}={kwargs[key]}"

    return ""
