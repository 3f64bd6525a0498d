from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from ..errors import FieldError, InvalidInputError

MIN_PASSWORD_LENGTH = 5
MIN_POST_FIELD_LENGTH = 6


def is_email(value: Optional[str]) -> bool:
    """Syntax check only; special-use domains such as ``.test`` and ``.local`` are refused."""
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def has_min_length(value: Optional[str], min_length: int) -> bool:
    return bool(value) and len(value) >= min_length


def check_user_input(email: str, password: str) -> List[FieldError]:
    errors: List[FieldError] = []
    if not is_email(email):
        errors.append(FieldError(field="email", message="Email is invalid"))
    if not has_min_length(password, MIN_PASSWORD_LENGTH):
        errors.append(
            FieldError(field="password", message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        )
    return errors


def check_post_input(title: str, content: str) -> List[FieldError]:
    errors: List[FieldError] = []
    if not has_min_length(title, MIN_POST_FIELD_LENGTH):
        errors.append(
            FieldError(field="title", message=f"Title must be at least {MIN_POST_FIELD_LENGTH} characters in length")
        )
    if not has_min_length(content, MIN_POST_FIELD_LENGTH):
        errors.append(
            FieldError(
                field="content", message=f"Content must be at least {MIN_POST_FIELD_LENGTH} characters in length"
            )
        )
    return errors


def raise_if_invalid(errors: List[FieldError]) -> None:
    """Raise one InvalidInputError carrying every accumulated message."""
    if errors:
        raise InvalidInputError(data=errors)
