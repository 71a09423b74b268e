from collections.abc import Awaitable, Callable
import functools
import logging

logger = logging.getLogger(__name__)


def _owner_session(args: tuple) -> object | None:
    # Repository methods carry the session on ``self``
    session = getattr(args[0], "session", None) if args else None
    if hasattr(session, "commit") and hasattr(session, "rollback"):
        return session
    return None


def transactional[**P, T](func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """
    Decorator for async write-methods of a repository holding ``self.session``.
    - Commits the session when the wrapped coroutine completes successfully.
    - Rolls back the session on any exception and re-raises it.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        db = _owner_session(args)
        try:
            result = await func(*args, **kwargs)
            if db is not None:
                await db.commit()  # type: ignore[attr-defined]
            return result
        except Exception as e:
            if db is not None:
                await db.rollback()  # type: ignore[attr-defined]
            logger.error("Transactional error in %s: %s", getattr(func, "__name__", str(func)), e)
            raise

    return wrapper
