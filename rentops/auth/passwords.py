"""bcrypt password hashing for manager accounts."""

import bcrypt

_ENCODING = "utf-8"


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    return bcrypt.hashpw(password.encode(_ENCODING), bcrypt.gensalt()).decode(_ENCODING)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Check ``plain_password`` against a stored hash.

    Accounts provisioned without a password (``hashed_password is None``)
    can never log in with one.
    """
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode(_ENCODING), hashed_password.encode(_ENCODING))
