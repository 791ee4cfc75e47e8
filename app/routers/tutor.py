"""
Tutor router handling the tutor catalogue.
Includes endpoints for listing, creating, updating and deleting tutors
and for bumping a tutor's review counter.
"""
from fastapi import APIRouter, Body, Depends
from pymongo.errors import PyMongoError
from datetime import datetime, timezone
from typing import Any, Dict
from app.database.database import RecordStore, get_store, TUTORS
from app.schemas.tutor_schema import TutorCreate
from app.utilities import APIError, parse_object_id, serialize, serialize_all, storage_failure, merge_fields
from app.logger import logger

router = APIRouter(prefix='/tutors')

@router.post('', status_code=201)
async def add_tutor(tutor: TutorCreate, store: RecordStore = Depends(get_store)):
    """
    Add a tutor to the catalogue.

    The review counter always starts at 0, whatever the client sends.

    Returns:
    - dict: Success message and the new tutor's id

    Raises:
    - APIError(400): If tutorName, language or price is missing or invalid
    - APIError(500): If the tutor could not be stored
    """
    document = tutor.model_dump(exclude={"_id"})
    document["review"] = 0
    document["createdAt"] = datetime.now(timezone.utc)
    try:
        inserted_id = await store.insert_one(TUTORS, document)
    except PyMongoError as e:
        raise storage_failure("Add tutor", e, "Failed to add tutor")
    logger.info(f"Tutor {inserted_id} added")
    return {"success": True, "message": "Tutor added", "insertedId": str(inserted_id)}

@router.get('')
async def get_tutors(store: RecordStore = Depends(get_store)):
    """Get every tutor, unfiltered."""
    try:
        tutors = await store.find_many(TUTORS)
    except PyMongoError as e:
        raise storage_failure("Fetch tutors", e, "Failed to fetch tutors")
    return serialize_all(tutors)

@router.get('/{tutor_id}')
async def get_tutor(tutor_id: str, store: RecordStore = Depends(get_store)):
    """
    Get a single tutor.

    Raises:
    - APIError(400): If tutor_id is not a valid identifier
    - APIError(404): If no tutor has that id
    """
    object_id = parse_object_id(tutor_id)
    try:
        tutor = await store.find_by_id(TUTORS, object_id)
    except PyMongoError as e:
        raise storage_failure("Fetch tutor", e, "Failed to fetch tutor")
    if not tutor:
        raise APIError(404, "Tutor not found")
    return serialize(tutor)

@router.patch('/review/{tutor_id}')
async def increment_review(tutor_id: str, store: RecordStore = Depends(get_store)):
    """Increase the tutor's review counter by one."""
    object_id = parse_object_id(tutor_id)
    try:
        result = await store.increment(TUTORS, object_id, "review")
    except PyMongoError as e:
        raise storage_failure("Review increment", e, "Failed to update review")
    if result.matched_count == 0:
        raise APIError(404, "Tutor not found", field="message")
    return {"success": True, "message": "Review count updated"}

@router.patch('/{tutor_id}')
async def update_tutor(tutor_id: str, updates: Dict[str, Any] = Body(...), store: RecordStore = Depends(get_store)):
    """
    Merge the request body into the tutor record.

    Returns:
    - dict: Success message and the number of modified records

    Raises:
    - APIError(400): If tutor_id is invalid or the body has no fields
    - APIError(404): If no tutor has that id
    """
    object_id = parse_object_id(tutor_id)
    fields = merge_fields(updates)
    try:
        result = await store.set_fields(TUTORS, object_id, fields)
    except PyMongoError as e:
        raise storage_failure("Update tutor", e, "Update failed")
    if result.matched_count == 0:
        raise APIError(404, "Tutor not found", field="message")
    message = "Tutor updated" if result.modified_count else "No changes made"
    return {"success": True, "message": message, "modifiedCount": result.modified_count}

@router.delete('/{tutor_id}')
async def delete_tutor(tutor_id: str, store: RecordStore = Depends(get_store)):
    """
    Delete a tutor. Bookings that reference it are left untouched.

    A missing tutor is reported through deletedCount == 0, not a 404.
    """
    object_id = parse_object_id(tutor_id)
    try:
        deleted_count = await store.delete_by_id(TUTORS, object_id)
    except PyMongoError as e:
        raise storage_failure("Delete tutor", e, "Failed to delete tutor")
    message = "Tutor deleted" if deleted_count else "No tutor deleted"
    return {"success": True, "message": message, "deletedCount": deleted_count}
