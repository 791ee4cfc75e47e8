from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Annotated, Optional
from bleach import clean

class TutorCreate(BaseModel):
    """Tutor creation data. Extra fields sent by the client are stored as-is."""
    model_config = ConfigDict(extra="allow")

    tutorName: str
    language: str
    # Finite and non-negative; NaN or Infinity could not be rendered back as JSON
    price: Annotated[float, Field(ge=0, allow_inf_nan=False)]
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator('tutorName', 'description')
    def sanitize_text(cls, v):
        if v is None:
            return v
        return clean(v, tags=set(), strip=True)
