"""Request bodies for the account endpoints.

Fields are optional at the schema level so the services can apply their
own ordered validation and report the first failing check.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SignupRequest(RequestModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    account_type: Optional[str] = Field(default=None, alias="accountType")
    otp: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "password": "Abcdef1!",
                "confirmPassword": "Abcdef1!",
                "accountType": "Student",
                "otp": "123456",
            }
        },
    )


class GoogleSignupRequest(RequestModel):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    account_type: Optional[str] = Field(default=None, alias="accountType")


class OtpRequest(RequestModel):
    first_name: Optional[str] = Field(default="", alias="firstName")
    last_name: Optional[str] = Field(default="", alias="lastName")
    email: Optional[str] = None


class LoginRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResetTokenRequest(RequestModel):
    email: Optional[str] = None


class ResetPasswordRequest(RequestModel):
    new_password: Optional[str] = Field(default=None, alias="newPassword")
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    token: Optional[str] = None


class ChangePasswordRequest(RequestModel):
    old_password: Optional[str] = Field(default=None, alias="oldPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")
    confirm_new_password: Optional[str] = Field(default=None, alias="confirmNewPassword")
    token: Optional[str] = None


class TagRequest(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    token: Optional[str] = None
