from passlib.context import CryptContext

BCRYPT_ROUNDS = 10

pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

def hash_password(p: str) -> str:
    if p is None:
        raise ValueError("password is required")
    p = str(p)
    b = p.encode("utf-8")
    if len(b) > 72:
        p = b[:72].decode("utf-8", errors="ignore")
    return pwd.hash(p)


class BcryptHasher:
    def hash(self, plaintext: str) -> str:
        return hash_password(plaintext)
