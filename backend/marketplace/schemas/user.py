from pydantic import BaseModel, Field

from marketplace.core.roles import Role


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: Role


class UserLogin(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    role: Role

    class Config:
        from_attributes = True


class Identity(BaseModel):
    id: int
    username: str
    role: Role


class LoginOut(BaseModel):
    message: str = "Login successful"
    user: UserOut
    access_token: str
    token_type: str = "bearer"
