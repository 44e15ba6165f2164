from quizroom import db
from quizroom.errors import Forbidden, NotFound
from quizroom.models import Membership, Room, User


def find_room_by_name(name: str):
    return Room.query.filter_by(name=name).first()


def get_room_or_404(room_id) -> Room:
    room = db.session.get(Room, room_id)
    if room is None:
        raise NotFound('Room not found')
    return room


def create_room(name: str, admin: User) -> Room:
    room = Room(name=name, created_by=admin.id, is_active=False)
    db.session.add(room)
    db.session.flush()
    return room


def get_admin_room(room_id, user_id, action: str) -> Room:
    """Load a room and check that `user_id` created it."""
    room = get_room_or_404(room_id)
    if not room.is_admin(user_id):
        raise Forbidden(f'Only the admin can {action}')
    return room


def get_membership(user_id, room_id, for_update=False):
    """Fetch one membership. With `for_update` the row stays locked until commit,
    so concurrent score updates for the same participant run one after another.
    """
    if not for_update:
        return db.session.get(Membership, (user_id, room_id))
    return (
        Membership.query.filter_by(user_id=user_id, room_id=room_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )


def upsert_membership(user: User, room: Room) -> Membership:
    """Insert a pending membership, leaving an existing one untouched.

    Re-joining must not reset an earned score or a previous acceptance.
    """
    membership = get_membership(user.id, room.id)
    if membership is None:
        membership = Membership(user_id=user.id, room_id=room.id, has_accepted=False, score=0)
        db.session.add(membership)
        db.session.flush()
    return membership


def list_memberships(room_id, ranked=False):
    query = Membership.query.join(User, Membership.user_id == User.id).filter(Membership.room_id == room_id)
    if ranked:
        query = query.order_by(Membership.score.desc(), Membership.joined_at.asc(), Membership.user_id.asc())
    else:
        query = query.order_by(Membership.joined_at.asc(), Membership.user_id.asc())
    return query.all()
