import pytest
import mongomock
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError, WriteError
from app.main import app
from app.database.database import RecordStore, get_store


class AsyncCursor:
    """Gives a mongomock cursor the to_list coroutine of pymongo's async cursors."""
    def __init__(self, cursor):
        self._cursor = cursor

    async def to_list(self, length=None):
        documents = list(self._cursor)
        return documents if length is None else documents[:length]


class AsyncCollection:
    """
    Awaitable view of a mongomock collection, shaped like pymongo's AsyncCollection.

    Operations named in failing raise a WriteError instead of running.
    """
    def __init__(self, collection, failing=()):
        self._collection = collection
        self._failing = set(failing)

    def _check(self, operation):
        if operation in self._failing:
            raise WriteError(f"{operation} failed on {self._collection.name}")

    async def insert_one(self, document):
        self._check("insert_one")
        return self._collection.insert_one(document)

    def find(self, query=None):
        self._check("find")
        return AsyncCursor(self._collection.find(query))

    async def find_one(self, query):
        self._check("find_one")
        return self._collection.find_one(query)

    async def update_one(self, query, update):
        self._check("update_one")
        return self._collection.update_one(query, update)

    async def delete_one(self, query):
        self._check("delete_one")
        return self._collection.delete_one(query)

    async def count_documents(self, query):
        self._check("count_documents")
        return self._collection.count_documents(query)

    async def aggregate(self, pipeline):
        self._check("aggregate")
        return AsyncCursor(self._collection.aggregate(pipeline))

    async def create_index(self, keys, **kwargs):
        return self._collection.create_index(keys, **kwargs)


class AsyncDatabase:
    def __init__(self, database, failing=None):
        self._database = database
        # collection name -> operations that fail on it
        self._failing = failing or {}

    def __getitem__(self, name):
        return AsyncCollection(self._database[name], self._failing.get(name, ()))

    async def command(self, name):
        return {"ok": 1.0}


class UnreachableCollection:
    """Collection whose every operation fails the way an unreachable server does."""
    def _fail(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("No servers found yet")

    async def _async_fail(self, *args, **kwargs):
        self._fail()

    find = _fail
    insert_one = find_one = update_one = delete_one = _async_fail
    count_documents = aggregate = create_index = _async_fail


class UnreachableDatabase:
    def __getitem__(self, name):
        return UnreachableCollection()

    async def command(self, name):
        raise ServerSelectionTimeoutError("No servers found yet")


@pytest.fixture
def mongo_db():
    database = mongomock.MongoClient()["tutorsDB"]
    database["users"].create_index("email", unique=True)
    return database


@pytest.fixture
def client(mongo_db):
    store = RecordStore(AsyncDatabase(mongo_db))
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    store = RecordStore(UnreachableDatabase())
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_tutor(client):
    def _make_tutor(**overrides):
        payload = {"tutorName": "Ana", "language": "Spanish", "price": 20}
        payload.update(overrides)
        response = client.post("/tutors", json=payload)
        assert response.status_code == 201
        return response.json()["insertedId"]
    return _make_tutor


@pytest.fixture
def make_booking(client):
    def _make_booking(tutor_id, user_email="student@gmail.com", date="2025-05-01T10:00:00"):
        response = client.post("/bookings", json={"tutorId": tutor_id, "userEmail": user_email, "date": date})
        assert response.status_code == 201
        return response.json()["insertedId"]
    return _make_booking


@pytest.fixture
def fail_operations(client, mongo_db):
    """Make the listed operations on one collection fail, leaving the rest of the store working."""
    def _fail_operations(collection, *operations):
        store = RecordStore(AsyncDatabase(mongo_db, {collection: operations}))
        app.dependency_overrides[get_store] = lambda: store
    return _fail_operations
