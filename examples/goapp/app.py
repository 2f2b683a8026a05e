"""goapp: users and user notes over a JSON API.

Layered the way a larger service would be: an in-memory store, domain
services that sanitize and validate (raising classified faults), a thin
API layer, and HTTP handlers. Handlers never build error responses
themselves; any fault they raise is turned into
``{"errors": <message>, "status": <code>}`` by the framework.

Run:
    cd examples/goapp && python app.py
"""

import itertools
import threading
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from perch import App, AppConfig, faults, responses
from perch.middleware import recoverer

STARTED_AT = datetime.now(UTC).isoformat()


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------


def _now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class User:
    email: str
    firstName: str = ""  # noqa: N815
    lastName: str = ""  # noqa: N815
    mobile: str = ""
    createdAt: str = field(default_factory=_now)  # noqa: N815

    def sanitize(self) -> None:
        self.email = self.email.strip()
        self.firstName = self.firstName.strip()
        self.lastName = self.lastName.strip()
        self.mobile = self.mobile.strip()


@dataclass(slots=True)
class Note:
    title: str
    content: str
    creator: str = ""
    id: str = ""
    createdAt: str = field(default_factory=_now)  # noqa: N815

    def sanitize(self) -> None:
        self.title = self.title.strip()
        self.content = self.content.strip()


def validate_email(email: str) -> None:
    if len(email.split("@")) != 2:
        raise faults.validation("invalid email address provided")


# ---------------------------------------------------------------------------
# In-memory store (thread-safe)
# ---------------------------------------------------------------------------


class Store:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._notes: dict[str, list[Note]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_user(self, user: User) -> None:
        with self._lock:
            if user.email in self._users:
                raise faults.duplicate(f"user with email {user.email!r} already exists")
            self._users[user.email] = user

    def read_user(self, email: str) -> User:
        with self._lock:
            try:
                return self._users[email]
            except KeyError as exc:
                raise faults.not_found_err(exc, "user not found") from exc

    def save_note(self, note: Note) -> str:
        with self._lock:
            note_id = str(next(self._ids))
            self._notes.setdefault(note.creator, []).append(note)
            return note_id

    def list_notes(self, email: str) -> list[Note]:
        with self._lock:
            return list(self._notes.get(email, ()))


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class Users:
    def __init__(self, store: Store) -> None:
        self.store = store

    def create(self, user: User) -> User:
        user.sanitize()
        if not user.email:
            raise faults.validation("email cannot be empty")
        validate_email(user.email)
        self.store.create_user(user)
        return user

    def read_by_email(self, email: str) -> User:
        email = email.strip()
        validate_email(email)
        return self.store.read_user(email)


class UserNotes:
    def __init__(self, store: Store, users: Users) -> None:
        self.store = store
        self.users = users

    def save(self, email: str, note: Note) -> Note:
        note.sanitize()
        if not note.title:
            raise faults.validation("note title cannot be empty")
        if not note.content:
            raise faults.validation("note content cannot be empty")
        note.creator = self.users.read_by_email(email).email
        note.id = self.store.save_note(note)
        return note

    def list_for(self, email: str) -> list[Note]:
        user = self.users.read_by_email(email)
        return self.store.list_notes(user.email)


class API:
    def __init__(self, users: Users, notes: UserNotes) -> None:
        self.users = users
        self.notes = notes

    def server_health(self) -> dict[str, str]:
        return {
            "env": "testing",
            "version": "v0.1.0",
            "status": "all systems up and running",
            "startedAt": STARTED_AT,
        }


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = App(AppConfig(port=8080, access_log=True))
app.use(recoverer)

_store = Store()
_users = Users(_store)
app.state.api = API(_users, UserNotes(_store, _users))


async def _decode(request, cls):
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise TypeError("expected a JSON object")
        return cls(**payload)
    except (ValueError, TypeError) as exc:
        raise faults.input_body_err(exc, "invalid JSON provided") from exc


@app.route("", name="helloworld", trailing_slash=True)
def hello_world(w, request):
    if request.content_type == "application/json":
        responses.send_response(w, "hello world", 200)
        return
    responses.send(w, "<h1>Welcome to the Home Page!</h1>", 200, "text/html; charset=utf-8")


@app.route("/-/health", name="health", trailing_slash=True)
def health(w, request):
    responses.r200(w, app.state.api.server_health())


@app.route("/users", method="POST", name="create-user", trailing_slash=True)
async def create_user(w, request):
    user = await _decode(request, User)
    responses.r201(w, asdict(app.state.api.users.create(user)))


@app.route("/users/:email", name="read-user-byemail", trailing_slash=True)
def read_user_by_email(w, request):
    user = app.state.api.users.read_by_email(request.path_params["email"])
    responses.r200(w, asdict(user))


@app.route("/users/:email/notes", method="POST", name="create-user-note", trailing_slash=True)
async def create_user_note(w, request):
    note = await _decode(request, Note)
    saved = app.state.api.notes.save(request.path_params["email"], note)
    responses.r201(w, asdict(saved))


@app.route("/users/:email/notes", name="list-user-notes", trailing_slash=True)
def list_user_notes(w, request):
    notes = app.state.api.notes.list_for(request.path_params["email"])
    responses.r200(w, [asdict(n) for n in notes])


if __name__ == "__main__":
    app.run()
