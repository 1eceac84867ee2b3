from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(password: str) -> str:
    """Salted one-way digest; a fresh salt is drawn on every call."""
    return generate_password_hash(password)


def verify_password(password: str, digest) -> bool:
    if not isinstance(password, str) or not isinstance(digest, str) or not digest:
        return False
    try:
        return check_password_hash(digest, password)
    except (ValueError, TypeError):
        # unknown hash method or a corrupted digest
        return False
