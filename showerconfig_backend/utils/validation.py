import re

from email_validator import EmailNotValidError, validate_email

SLUG_REGEX = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
COLOR_CODE_REGEX = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def validate_slug(value: str) -> str:
    """
    Slugs: minúsculas, dígitos e hífens simples entre blocos.
    Ex.: "neo-angle", "wall-panels".
    """
    if not isinstance(value, str):
        raise ValueError("slug inválido")
    value = value.strip().lower()
    if not SLUG_REGEX.match(value):
        raise ValueError("slug deve conter apenas letras minúsculas, números e hífens")
    return value


def normalize_color_code(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not COLOR_CODE_REGEX.match(value):
        raise ValueError("código de cor hexadecimal inválido")
    return value.upper()


def normalize_email(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    if not value:
        return None
    try:
        return validate_email(value, check_deliverability=False).normalized.lower()
    except EmailNotValidError as exc:
        raise ValueError(f"email inválido: {exc}") from exc
