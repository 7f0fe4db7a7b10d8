from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    name: str = Field(min_length=3, max_length=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        # length limits apply to the name as stored
        return v.strip() if isinstance(v, str) else v


class LoginIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    device_token: str | None = Field(default=None, alias="deviceToken", max_length=64)


class Verify2FAIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    code: str = Field(pattern=r"^[0-9]{6}$")
    device_token: str | None = Field(default=None, alias="deviceToken", max_length=64)
