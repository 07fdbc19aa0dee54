from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.utils.validators import not_blank


class ModelType(str, Enum):
    RECOGNITION = "RECOGNITION"
    DETECTION = "DETECTION"
    VERIFICATION = "VERIFICATION"


class ModelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    type: ModelType = ModelType.RECOGNITION

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return not_blank(v, "Model name cannot be empty")


class ModelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[ModelType] = None

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return not_blank(v, "Model name cannot be empty")


class ModelResponseDto(BaseModel):
    """Модель в том виде, в котором ее видит UI"""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

    id: str
    name: str
    api_key: str
    type: ModelType
    subject_count: Optional[int] = None
    image_count: Optional[int] = None
    created_date: Optional[datetime] = None


class ClassifierStatus(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=()
    )

    model_id: str
    classifier_name: Optional[str] = None
    trained: bool = False
