from bson import ObjectId
from datetime import datetime
from fastapi import HTTPException
from pydantic import EmailStr, TypeAdapter, ValidationError
from typing import Any, Dict, List
from app.logger import logger

email_adapter = TypeAdapter(EmailStr)

class APIError(HTTPException):
    """
    Error rendered as the JSON envelope {"success": false, <field>: text}.

    field is "error" for malformed input and storage failures and "message"
    for not-found and conflict conditions.
    """
    def __init__(self, status_code: int, text: str, field: str = "error"):
        super().__init__(status_code=status_code, detail=text)
        self.field = field

    def body(self) -> Dict[str, Any]:
        return {"success": False, self.field: self.detail}

def parse_object_id(value: str) -> ObjectId:
    """Convert a 24 character hex string to an ObjectId, 400 otherwise."""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise APIError(400, "Invalid ID format")
    return ObjectId(value)

def normalize_email(value: str) -> str:
    """
    Normalize an address the way EmailStr does for stored records
    (the domain is lowercased), so lookups match what was saved.
    Strings that are not valid addresses are returned unchanged.
    """
    try:
        return email_adapter.validate_python(value)
    except ValidationError:
        return value

def storage_failure(action: str, error: Exception, text: str) -> APIError:
    """Log a store error and build the 500 response reported to the caller."""
    logger.error(f"{action} error: {str(error)}")
    return APIError(500, text)

def serialize(value: Any) -> Any:
    """Make a stored document JSON friendly (ObjectId -> hex, datetime -> ISO-8601)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize(item) for item in value]
    return value

def serialize_all(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize(document) for document in documents]

def merge_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """Fields of a PATCH body that may be written to a record."""
    fields = {key: value for key, value in body.items() if key != "_id"}
    if not fields:
        raise APIError(400, "No fields to update")
    return fields
