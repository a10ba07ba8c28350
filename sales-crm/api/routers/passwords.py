"""
Passwords API Endpoints.

Password generation and policy validation for account management flows.
"""

from fastapi import APIRouter

from api.models import (
    GeneratePasswordRequest,
    GeneratePasswordResponse,
    ValidatePasswordRequest,
    ValidatePasswordResponse,
)
from domain.password import generate_password, validate_password

router = APIRouter()


@router.post(
    "/passwords/generate",
    response_model=GeneratePasswordResponse,
    summary="Generate Password",
    description="Generate a random password that satisfies the password policy."
)
def generate(request: GeneratePasswordRequest):
    return GeneratePasswordResponse(password=generate_password(request.length))


@router.post(
    "/passwords/validate",
    response_model=ValidatePasswordResponse,
    summary="Validate Password",
    description="Check a password against the policy and report the first rule it breaks."
)
def validate(request: ValidatePasswordRequest):
    """
    Rules are checked in order: length >= 8, uppercase, lowercase, digit,
    special character (!@#$%&*). A rejected password is a normal response, not an error.
    """
    error = validate_password(request.password)
    return ValidatePasswordResponse(valid=error is None, error=error)
