import uuid
from typing import List

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.database import Model as ModelDB
from app.models.model import ModelCreate, ModelUpdate, ModelResponseDto, ClassifierStatus
from app.utils.exceptions import ModelNotFoundError, DemoNotAvailableError

logger = structlog.get_logger()


class ModelService:
    """Сервис для работы с моделями распознавания"""

    def _get_or_raise(self, db: Session, model_id: str) -> ModelDB:
        db_model = db.query(ModelDB).filter(ModelDB.id == model_id).first()
        if not db_model:
            raise ModelNotFoundError(model_id)
        return db_model

    def create_model(self, db: Session, model_data: ModelCreate) -> ModelResponseDto:
        """Создать новую модель"""
        try:
            db_model = ModelDB(
                id=str(uuid.uuid4()),
                name=model_data.name.strip(),
                api_key=str(uuid.uuid4()),
                type=model_data.type,
                subject_count=0,
                image_count=0
            )
            db.add(db_model)
            db.commit()
            db.refresh(db_model)

            logger.info("Model created", model_id=db_model.id, name=db_model.name)
            return ModelResponseDto.model_validate(db_model)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to create model", error=str(e))
            raise

    def get_model_info(self, db: Session, model_id: str) -> ModelResponseDto:
        """Получить модель по ID"""
        return ModelResponseDto.model_validate(self._get_or_raise(db, model_id))

    def list_models(self, db: Session, limit: int = 100, offset: int = 0) -> List[ModelResponseDto]:
        """Получить список моделей"""
        db_models = db.query(ModelDB).order_by(
            ModelDB.created_date.desc(), ModelDB.name
        ).limit(limit).offset(offset).all()

        return [ModelResponseDto.model_validate(m) for m in db_models]

    def update_model(self, db: Session, model_id: str, model_data: ModelUpdate) -> ModelResponseDto:
        """Обновить имя или тип модели"""
        db_model = self._get_or_raise(db, model_id)
        try:
            if model_data.name is not None:
                db_model.name = model_data.name.strip()
            if model_data.type is not None:
                db_model.type = model_data.type

            db.commit()
            db.refresh(db_model)

            logger.info("Model updated", model_id=model_id, new_name=model_data.name)
            return ModelResponseDto.model_validate(db_model)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to update model", model_id=model_id, error=str(e))
            raise

    def get_classifier_status(self, db: Session, model_id: str) -> ClassifierStatus:
        """Состояние классификатора модели"""
        db_model = self._get_or_raise(db, model_id)
        return ClassifierStatus(
            model_id=db_model.id,
            classifier_name=db_model.classifier_name,
            trained=db_model.classifier is not None
        )

    def get_demo_model(self, db: Session) -> ModelResponseDto:
        """Получить демо-модель, если демо включено"""
        if not settings.demo_enabled:
            raise DemoNotAvailableError()

        db_model = db.query(ModelDB).filter(ModelDB.id == settings.demo_model_id).first()
        if not db_model:
            logger.warning("Demo model is missing", model_id=settings.demo_model_id)
            raise DemoNotAvailableError()

        return ModelResponseDto.model_validate(db_model)


# Глобальный экземпляр сервиса
model_service = ModelService()
