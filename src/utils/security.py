from passlib.context import CryptContext

# pbkdf2 keeps passlib free of the bcrypt backend
pwd_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return pwd_ctx.verify(plain, hashed)
    except ValueError:
        # unrecognised hash format, e.g. a legacy plaintext row
        return False
