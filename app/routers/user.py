"""
User router handling account records.
Includes endpoints for registering users, looking them up by email,
changing their role and deleting them.
"""
from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError, PyMongoError
from datetime import datetime, timezone
from app.database.database import RecordStore, get_store, USERS
from app.schemas.user_schema import UserCreate, UserRoleUpdate
from app.utilities import APIError, parse_object_id, serialize, serialize_all, storage_failure, normalize_email
from app.logger import logger

router = APIRouter(prefix='/users')

@router.post('', status_code=201)
async def create_user(user: UserCreate, store: RecordStore = Depends(get_store)):
    """
    Register a user.

    Parameters:
    - user: name, email and an optional role (stored lowercase, defaults to "user")

    Returns:
    - dict: Success message and the new user's id

    Raises:
    - APIError(400): If name or email is missing or invalid
    - APIError(409): If the email is already registered
    """
    try:
        existing = await store.find_one(USERS, {"email": user.email})
        if existing:
            raise APIError(409, "User already exists", field="message")
        document = user.model_dump()
        document["createdAt"] = datetime.now(timezone.utc)
        inserted_id = await store.insert_one(USERS, document)
    except DuplicateKeyError:
        # Lost a race against another registration of the same email
        raise APIError(409, "User already exists", field="message")
    except PyMongoError as e:
        raise storage_failure("Create user", e, "Failed to create user")
    logger.info(f"User {inserted_id} registered with role {user.role}")
    return {"success": True, "message": "User created", "insertedId": str(inserted_id)}

@router.get('')
async def get_users(store: RecordStore = Depends(get_store)):
    try:
        users = await store.find_many(USERS)
    except PyMongoError as e:
        raise storage_failure("Fetch users", e, "Failed to fetch users")
    return serialize_all(users)

@router.get('/{email}')
async def get_user(email: str, store: RecordStore = Depends(get_store)):
    """Look a user up by email. 404 if nobody registered with it."""
    try:
        user = await store.find_one(USERS, {"email": normalize_email(email)})
    except PyMongoError as e:
        raise storage_failure("Fetch user", e, "Failed to fetch user")
    if not user:
        raise APIError(404, "User not found", field="message")
    return serialize(user)

@router.patch('/{user_id}')
async def update_user_role(user_id: str, update: UserRoleUpdate, store: RecordStore = Depends(get_store)):
    """
    Change a user's role.

    Raises:
    - APIError(400): If user_id is invalid or no role is given
    - APIError(404): If no user has that id
    """
    object_id = parse_object_id(user_id)
    try:
        result = await store.set_fields(USERS, object_id, {"role": update.role})
    except PyMongoError as e:
        raise storage_failure("Update user role", e, "Failed to update user role")
    if result.matched_count == 0:
        raise APIError(404, "User not found", field="message")
    return {"success": True, "message": "User role updated", "modifiedCount": result.modified_count}

@router.delete('/{user_id}')
async def delete_user(user_id: str, store: RecordStore = Depends(get_store)):
    object_id = parse_object_id(user_id)
    try:
        deleted_count = await store.delete_by_id(USERS, object_id)
    except PyMongoError as e:
        raise storage_failure("Delete user", e, "Failed to delete user")
    message = "User deleted" if deleted_count else "No user deleted"
    return {"success": True, "message": message, "deletedCount": deleted_count}
