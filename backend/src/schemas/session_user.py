"""Identity attached to a request by the session layer."""
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionUser:
    """
    Lightweight identity stored in a session: {id, name, email}.

    This is what `get_current_user` returns. It is copied at login, so it is
    not an ORM object; do not expect relationships such as `.tasks` on it.
    """

    id: int
    name: str
    email: str
