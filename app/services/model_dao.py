import pickle
import uuid
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.database import Model
from app.utils.exceptions import ClassifierNotTrainedError

logger = structlog.get_logger()


class ModelDao:
    """Хранение обученных классификаторов моделей"""

    def save_model(self, db: Session, model_id: str, classifier: Any) -> Model:
        """Сохранить классификатор модели (создать модель, если ее нет)"""
        try:
            model = db.query(Model).filter(Model.id == model_id).first()
            if model is None:
                model = Model(id=model_id, name=model_id, api_key=str(uuid.uuid4()))
                db.add(model)

            model.classifier = pickle.dumps(classifier)
            model.classifier_name = settings.classifier_name

            db.commit()
            db.refresh(model)

            logger.info("Classifier saved", model_id=model_id, classifier_name=model.classifier_name)
            return model

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to save classifier", model_id=model_id, error=str(e))
            raise

    def get_model(self, db: Session, model_id: str) -> Any:
        """Получить классификатор модели"""
        model = db.query(Model).filter(Model.id == model_id).first()
        if model is None or model.classifier is None:
            raise ClassifierNotTrainedError(model_id)

        return pickle.loads(model.classifier)

    def delete_model(self, db: Session, model_id: str) -> None:
        """Удалить модель; отсутствие модели ошибкой не считается"""
        try:
            model = db.query(Model).filter(Model.id == model_id).first()
            if model is None:
                logger.info(f"Model with id : {model_id} not found")
                return

            db.delete(model)
            db.commit()

            logger.info("Model deleted", model_id=model_id)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to delete model", model_id=model_id, error=str(e))
            raise


# Глобальный экземпляр DAO
model_dao = ModelDao()
