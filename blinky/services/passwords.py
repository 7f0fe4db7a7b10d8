from passlib.context import CryptContext

pwd = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd.verify(password, password_hash)
    except ValueError:
        # unrecognised or corrupt hash in storage
        return False

def burn_verify_time() -> None:
    """Spend roughly one hash verification so unknown emails cost the same as wrong passwords."""
    pwd.dummy_verify()
