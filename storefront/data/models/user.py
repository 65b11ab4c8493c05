from sqlalchemy import Column, Integer, String
from storefront.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, unique=True)
    role = Column(String, nullable=False, default="USER")  # USER, ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"
