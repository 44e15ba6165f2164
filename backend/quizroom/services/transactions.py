from contextlib import contextmanager
from functools import wraps

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizroom import db
from quizroom.errors import Conflict, Internal, WorkflowError


@contextmanager
def unit_of_work(action: str):
    """Commit everything done inside the block, or roll all of it back.

    Workflow errors are re-raised untouched after the rollback. Storage
    errors are logged and converted: unique/foreign key violations become
    `Conflict`, anything else becomes `Internal`.
    """
    try:
        yield db.session
        db.session.commit()
    except WorkflowError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[{action}] rejected: {exc.kind}: {exc.message}")
        raise
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[{action}] constraint violation: {exc.orig}")
        raise Conflict() from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"[{action}] storage failure")
        raise Internal(f'Could not {action.replace("_", " ")}') from exc


def retry_on_conflict(func):
    """Run `func` again once if it raised `Conflict`.

    Get-or-create style operations lose unique-key races to concurrent
    requests; the second attempt finds the winning row by lookup.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Conflict:
            current_app.logger.info(f"[{func.__name__}] conflict, retrying once")
            return func(*args, **kwargs)
    return wrapper
