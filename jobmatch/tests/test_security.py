import re
from passlib.context import CryptContext

from jobmatch.security import hash_password, needs_rehash, verify_password


def test_hash_password_and_verify_success():
    plain = "s3cret-P@ss!"
    hashed = hash_password(plain)

    assert isinstance(hashed, str)
    assert hashed != plain
    # bcrypt hashes usually start with $2b$ (or $2a$/$2y$)
    assert re.match(r"^\$2[aby]?\$12\$", hashed)

    assert verify_password(plain, hashed) is True


def test_verify_password_failure_with_wrong_plain():
    hashed = hash_password("correct")
    assert verify_password("wrong", hashed) is False


def test_low_cost_hash_is_flagged_for_rehash():
    weak = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4).hash("password123")
    assert verify_password("password123", weak) is True
    assert needs_rehash(weak) is True
    assert needs_rehash(hash_password("password123")) is False
