from pydantic import BaseModel


class UserCreate(BaseModel):
    name: str | None = None
    email: str | None = None


class UserCreatedOut(BaseModel):
    user_id: int


class UserOut(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True
