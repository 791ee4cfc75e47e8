from pydantic import BaseModel, EmailStr, StringConstraints, field_validator
from typing import Annotated, Optional
from bleach import clean

DEFAULT_ROLE = "user"

############################
### USER ACCOUNT SCHEMAS ###
############################

class UserCreate(BaseModel):
    """User registration data"""
    # Add constraints to name field (min length: 1, max length: 100)
    name: Annotated[str, StringConstraints(min_length=1, max_length=100)]
    email: EmailStr
    role: Optional[str] = DEFAULT_ROLE

    @field_validator('name')
    def sanitize_name(cls, v):
        return clean(v, tags=set(), strip=True)

    @field_validator('role')
    def normalize_role(cls, v):
        if not v:
            return DEFAULT_ROLE
        return v.strip().lower()

class UserRoleUpdate(BaseModel):
    """Role change for an existing user"""
    role: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

    @field_validator('role')
    def normalize_role(cls, v):
        return v.lower()
