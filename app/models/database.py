from sqlalchemy import Column, Integer, String, DateTime, LargeBinary, Enum as SAEnum
from sqlalchemy.sql import func

from app.config.database import Base
from app.models.model import ModelType


class Model(Base):
    __tablename__ = "models"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(50), nullable=False, index=True)
    api_key = Column(String(36), nullable=False, unique=True)
    type = Column(SAEnum(ModelType), nullable=False, default=ModelType.RECOGNITION)

    # Обученный классификатор (pickle)
    classifier = Column(LargeBinary, nullable=True)
    classifier_name = Column(String(255), nullable=True)

    subject_count = Column(Integer, default=0)
    image_count = Column(Integer, default=0)
    created_date = Column(DateTime(timezone=True), server_default=func.now())
