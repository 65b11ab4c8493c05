from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.errors import UnauthenticatedError
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import UserCreate, UserRead
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate, created_by: UserModel | None = None) -> UserRead:
        """
        Rejestracja użytkownika o id nadanym przez dostawcę tożsamości.
        Ponowne wywołanie dla istniejącego id zwraca zapisany rekord.
        Konto ADMIN może założyć tylko inny administrator.
        """
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        if payload.role == "ADMIN" and not (created_by and created_by.is_admin):
            raise PermissionError("Tylko administrator może nadać rolę ADMIN")

        email = payload.email.strip().lower() if payload.email else None
        if email:
            owner = self.repo.get_user_by_email(email)
            if owner:
                raise ValueError(f"Adres {email} jest już przypisany do innego użytkownika")

        user = UserModel(id=payload.id, name=payload.name, email=email, role=payload.role)
        try:
            created = self.repo.add_user(user)
        except IntegrityError:
            # ten sam adres zapisany równolegle
            self.repo.rollback()
            raise ValueError(f"Adres {email} jest już przypisany do innego użytkownika")
        logger.info(f"Utworzono użytkownika {created.id} z rolą {created.role}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")
        return UserRead.model_validate(user)

    def authenticate(self, user_id: int | None) -> UserModel:
        """Id przekazane przez dostawce tożsamości musi wskazywać istniejącego użytkownika."""
        if user_id is None:
            raise UnauthenticatedError()
        user = self.repo.get_user(user_id)
        if not user:
            raise UnauthenticatedError(f"Nieznany użytkownik {user_id}")
        return user
