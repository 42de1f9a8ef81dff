"""bcrypt password hashing for both identity sources."""

import bcrypt

# bcrypt only reads this many bytes; longer inputs are rejected by bcrypt>=5.
MAX_PASSWORD_BYTES = 72


def check_password_length(plain: str) -> str:
    if len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return plain


def hash_password(plain: str) -> str:
    check_password_length(plain)
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage, or an over-long password
        return False
