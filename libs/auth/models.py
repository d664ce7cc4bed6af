from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents a dashboard user decoded from the CMS-issued admin token.
    """

    user_id: str = Field(..., alias="sub")
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    role: str = "editor"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
