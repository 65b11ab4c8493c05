#storefront/api/routers/users.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.schemas import UserCreate, UserRead
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=201)
def create_user(
    payload: UserCreate,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    # anonimowa rejestracja jest dozwolona, nagłówek liczy się tylko przy nadawaniu roli ADMIN
    caller = service.authenticate(user_id) if user_id is not None else None
    try:
        return service.create_user(payload, created_by=caller)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/me", response_model=UserRead)
def get_me(
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return UserService(db).authenticate(user_id)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    caller_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    caller = service.authenticate(caller_id)
    if caller.id != user_id and not caller.is_admin:
        raise HTTPException(status_code=403, detail="Brak dostępu do danych innego użytkownika")
    try:
        return service.get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
