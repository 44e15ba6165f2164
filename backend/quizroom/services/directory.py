from quizroom import db
from quizroom.models import User


def find_user_by_name(name: str):
    return User.query.filter_by(name=name).first()


def get_or_create_user(name: str) -> User:
    """Look the user up by display name, inserting a new row if absent.

    The insert is flushed so a concurrent insert of the same name surfaces
    as an IntegrityError inside the caller's unit of work.
    """
    user = find_user_by_name(name)
    if user is None:
        user = User(name=name)
        db.session.add(user)
        db.session.flush()
    return user
