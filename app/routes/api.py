from fastapi import APIRouter, Depends, Header, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import structlog

from app.config.database import get_db
from app.config.settings import settings
from app.models.model import ModelCreate, ModelUpdate, ModelResponseDto, ClassifierStatus
from app.services.model_dao import model_dao
from app.services.model_service import model_service
from app.utils.exceptions import MissingHeaderError, ConstraintViolationsError
from app.utils.validators import ModelValidator

logger = structlog.get_logger()


def require_api_key(x_api_key: Optional[str] = Header(None, alias=settings.api_key_header)) -> str:
    """Проверить наличие заголовка с API ключом"""
    if not x_api_key:
        raise MissingHeaderError(settings.api_key_header)
    return x_api_key


def valid_model_id(model_id: str) -> str:
    """Проверить ID модели из пути запроса"""
    validation_result = ModelValidator.validate_model_id(model_id)
    if not validation_result['is_valid']:
        logger.warning("Invalid model id", violations=len(validation_result['violations']))
        raise ConstraintViolationsError(validation_result['violations'])
    return model_id


router = APIRouter(prefix="/api", tags=["api"], dependencies=[Depends(require_api_key)])


@router.get("/models", response_model=List[ModelResponseDto])
async def get_all_models(
        limit: int = 50,
        offset: int = 0,
        db: Session = Depends(get_db)
):
    """Получить список моделей"""
    limit = min(max(limit, 1), 100)  # Ограничиваем от 1 до 100
    offset = max(offset, 0)

    return model_service.list_models(db, limit, offset)


@router.post("/models", response_model=ModelResponseDto, status_code=201)
async def create_model(model_data: ModelCreate, db: Session = Depends(get_db)):
    """Создать новую модель"""
    return model_service.create_model(db, model_data)


@router.get("/models/{model_id}", response_model=ModelResponseDto)
async def get_model(model_id: str = Depends(valid_model_id), db: Session = Depends(get_db)):
    """Получить информацию о модели"""
    return model_service.get_model_info(db, model_id)


@router.put("/models/{model_id}", response_model=ModelResponseDto)
async def update_model(
        model_data: ModelUpdate,
        model_id: str = Depends(valid_model_id),
        db: Session = Depends(get_db)
):
    """Обновить модель"""
    return model_service.update_model(db, model_id, model_data)


@router.delete("/models/{model_id}", status_code=204)
async def delete_model(model_id: str = Depends(valid_model_id), db: Session = Depends(get_db)):
    """Удалить модель вместе с классификатором"""
    model_dao.delete_model(db, model_id)
    return Response(status_code=204)


@router.get("/models/{model_id}/classifier", response_model=ClassifierStatus)
async def get_classifier_status(model_id: str = Depends(valid_model_id), db: Session = Depends(get_db)):
    """Состояние классификатора модели"""
    return model_service.get_classifier_status(db, model_id)


@router.get("/demo", response_model=ModelResponseDto)
async def get_demo_model(db: Session = Depends(get_db)):
    """Получить демо-модель"""
    return model_service.get_demo_model(db)
