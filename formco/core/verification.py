# core/verification.py
import secrets
import string
from typing import Optional

from formco.config import Settings

CODE_ALPHABET = string.ascii_uppercase + string.digits


def issue_code(length: Optional[int] = None) -> str:
    # Not a credential and not checked for uniqueness; collisions are tolerated.
    size = length if length is not None else Settings().verification_code_length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(size))
