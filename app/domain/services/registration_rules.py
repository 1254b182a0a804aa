from __future__ import annotations

import ipaddress
import re

from app.domain.exceptions import ValidationError


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9]{4,15}$")

NAME_MAX_LENGTH = 120
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 256


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return re.sub(r"[\s\-()]", "", phone.strip())


def validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("name is required.")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"name must have at most {NAME_MAX_LENGTH} characters.")
    return name


def validate_email(email: str) -> str:
    email = normalize_email(email)
    if not email:
        raise ValidationError("email is required.")
    if len(email) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(email):
        raise ValidationError("email has an invalid format.")
    return email


def validate_phone(phone: str) -> str:
    phone = normalize_phone(phone)
    if not phone:
        raise ValidationError("phone is required.")
    if not PHONE_PATTERN.match(phone):
        raise ValidationError("phone has an invalid format.")
    return phone


def validate_password(password: str) -> str:
    if not password:
        raise ValidationError("password is required.")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"password must have at least {PASSWORD_MIN_LENGTH} characters.")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"password must have at most {PASSWORD_MAX_LENGTH} characters.")
    if not re.search(r"[a-z]", password) or not re.search(r"[A-Z]", password):
        raise ValidationError("password must mix upper and lower case letters.")
    if not re.search(r"[0-9]", password):
        raise ValidationError("password must contain a digit.")
    return password


def resolve_client_ip(client_addr: str) -> str:
    """Reduce a transport address (``host:port``, ``[v6]:port`` or a bare IP) to the IP."""
    addr = (client_addr or "").strip()
    if not addr:
        raise ValidationError("client address is required.")

    host = addr
    if addr.startswith("["):
        end = addr.find("]")
        if end == -1:
            raise ValidationError("client address is invalid.")
        host = addr[1:end]
    elif addr.count(":") == 1:
        host = addr.rsplit(":", 1)[0]

    try:
        return str(ipaddress.ip_address(host))
    except ValueError as exc:
        raise ValidationError("client address is invalid.") from exc
