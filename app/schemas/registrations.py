from pydantic import BaseModel, Field


class RegistrationRequest(BaseModel):
    user_id: int = Field(ge=1)
    event_id: int = Field(ge=1)


class MessageOut(BaseModel):
    message: str
