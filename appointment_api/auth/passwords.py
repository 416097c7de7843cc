import bcrypt

BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes and newer releases refuse longer input.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def verify_password(password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(password), hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False
