import secrets
import threading
import time
import uuid

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
REGISTRATION_NUMBER_PREFIX = "REG-"
SUFFIX_LENGTH = 4

_lock = threading.Lock()
_last_millis = 0


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base36"""
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_random_string(length: int = SUFFIX_LENGTH) -> str:
    """Generate a random base36 string"""
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def _next_millis() -> int:
    """Millisecond clock that never repeats or goes backwards within this process"""
    global _last_millis
    with _lock:
        now = int(time.time() * 1000)
        if now <= _last_millis:
            now = _last_millis + 1
        _last_millis = now
        return now


def generate_registration_number() -> str:
    """REG-<base36 timestamp><random suffix>, uppercased"""
    code = to_base36(_next_millis()) + generate_random_string()
    return f"{REGISTRATION_NUMBER_PREFIX}{code.upper()}"


def generate_registration_id() -> str:
    """Opaque primary key for a registration"""
    return str(uuid.uuid4())
