"""
Booking router handling reservations of tutors by users.
Includes the review workflow: a booking is marked reviewed once, and the
booked tutor's review counter goes up by one.
"""
from fastapi import APIRouter, Body, Depends
from pymongo.errors import PyMongoError
from datetime import datetime, timezone
from typing import Any, Dict
from app.database.database import RecordStore, get_store, BOOKINGS, TUTORS
from app.schemas.booking_schema import BookingCreate
from app.utilities import APIError, parse_object_id, serialize_all, storage_failure, merge_fields, normalize_email
from app.logger import logger

router = APIRouter(prefix='/bookings')

@router.post('', status_code=201)
async def create_booking(booking: BookingCreate, store: RecordStore = Depends(get_store)):
    """
    Book a tutor.

    Returns:
    - dict: Success message and the new booking's id

    Raises:
    - APIError(400): If tutorId, userEmail or date is missing or invalid
    - APIError(500): If the booking could not be stored
    """
    document = booking.model_dump(exclude={"date", "_id"})
    document["tutorId"] = parse_object_id(booking.tutorId)
    document["bookedAt"] = booking.date
    document["reviewed"] = False
    document["createdAt"] = datetime.now(timezone.utc)
    try:
        inserted_id = await store.insert_one(BOOKINGS, document)
    except PyMongoError as e:
        raise storage_failure("Booking", e, "Failed to book tutor")
    logger.info(f"Booking {inserted_id} created for tutor {booking.tutorId}")
    return {"success": True, "message": "Booking successful", "insertedId": str(inserted_id)}

@router.get('/{email}')
async def get_bookings(email: str, store: RecordStore = Depends(get_store)):
    """
    Get a user's bookings, each with the booked tutor's name, language, price and image.
    Bookings of tutors that have since been deleted are left out.
    """
    try:
        bookings = await store.bookings_with_tutor(normalize_email(email))
    except PyMongoError as e:
        raise storage_failure("Fetch bookings", e, "Failed to fetch bookings")
    return serialize_all(bookings)

@router.patch('/reviewed/{booking_id}')
async def mark_reviewed(booking_id: str, store: RecordStore = Depends(get_store)):
    """
    Mark a booking as reviewed and credit the booked tutor with one review.

    The two writes are not atomic: if the second one fails the booking stays
    reviewed without the tutor's counter being increased.

    Raises:
    - APIError(400): If booking_id is invalid or the booking was already reviewed
    - APIError(404): If no booking has that id
    - APIError(500): If either write fails
    """
    object_id = parse_object_id(booking_id)
    try:
        booking = await store.find_by_id(BOOKINGS, object_id)
        if not booking:
            raise APIError(404, "Booking not found", field="message")
        if booking.get("reviewed"):
            raise APIError(400, "Booking already reviewed")

        # Only flip the flag if no concurrent request got there first
        result = await store.update_where(
            BOOKINGS,
            {"_id": object_id, "reviewed": {"$ne": True}},
            {"$set": {"reviewed": True}},
        )
        if result.modified_count == 0:
            raise APIError(400, "Booking already reviewed")
    except PyMongoError as e:
        raise storage_failure("Update booking status", e, "Failed to update booking review status")

    try:
        tutor_result = await store.increment(TUTORS, booking["tutorId"], "review")
    except PyMongoError as e:
        raise storage_failure("Review increment", e, "Booking reviewed but tutor review count was not updated")
    if tutor_result.matched_count == 0:
        logger.warning(f"Booking {booking_id} reviewed but tutor {booking['tutorId']} no longer exists")

    return {"success": True, "message": "Booking marked as reviewed"}

@router.patch('/{booking_id}')
async def update_booking(booking_id: str, updates: Dict[str, Any] = Body(...), store: RecordStore = Depends(get_store)):
    """
    Merge the request body into the booking record.

    The reviewed flag is owned by the review endpoint and cannot be set here.
    """
    object_id = parse_object_id(booking_id)
    if "reviewed" in updates:
        raise APIError(400, "The reviewed flag can only be set through /bookings/reviewed/{id}")
    fields = merge_fields(updates)
    if "tutorId" in fields:
        fields["tutorId"] = parse_object_id(fields["tutorId"])
    if "userEmail" in fields:
        fields["userEmail"] = normalize_email(fields["userEmail"])
    try:
        result = await store.set_fields(BOOKINGS, object_id, fields)
    except PyMongoError as e:
        raise storage_failure("Update booking", e, "Failed to update booking")
    if result.matched_count == 0:
        raise APIError(404, "Booking not found", field="message")
    return {"success": True, "message": "Booking updated", "modifiedCount": result.modified_count}

@router.delete('/{booking_id}')
async def delete_booking(booking_id: str, store: RecordStore = Depends(get_store)):
    object_id = parse_object_id(booking_id)
    try:
        deleted_count = await store.delete_by_id(BOOKINGS, object_id)
    except PyMongoError as e:
        raise storage_failure("Delete booking", e, "Failed to delete booking")
    message = "Booking deleted" if deleted_count else "No booking deleted"
    return {"success": True, "message": message, "deletedCount": deleted_count}
