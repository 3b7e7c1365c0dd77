from pydantic import BaseModel, Field

class SignupRequest(BaseModel):
    email: str  # plain str to allow .local and other dev domains
    password: str = Field(min_length=8)
    name: str = ""
    phone: str = ""

class LoginRequest(BaseModel):
    email: str
    password: str

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class MeOut(BaseModel):
    id: str
    email: str
    name: str = ""
    phone: str = ""
    role: str
