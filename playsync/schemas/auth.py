from pydantic import BaseModel, Field


class GoogleLoginRequest(BaseModel):
    code: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    player_id: int
    token: str
    token_type: str = "bearer"
    is_new_player: bool
