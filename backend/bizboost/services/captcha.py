"""
Captcha Service

Issues short-lived arithmetic challenges and verifies answers.

Lifecycle of a challenge:
  Issued -> Consumed-Valid | Consumed-Invalid | Expired

A challenge is removed from the store by the first validation attempt,
whatever its outcome, so it can never be retried or replayed. Expired
challenges that are never submitted are removed by the key-value store sweep
(services.sweepers).
"""
import random
import re
from dataclasses import dataclass
from typing import Any, Optional

from bizboost.config import settings
from .kv_base import KeyValueStore
from .kv_factory import kv_store
from bizboost.core.security import new_token

OPERAND_MIN = 1
OPERAND_MAX = 20

ERR_NOT_FOUND = "Captcha not found or expired"
ERR_EXPIRED = "Captcha expired"
ERR_FORMAT = "Invalid answer format"
ERR_INCORRECT = "Incorrect answer"

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass
class CaptchaChallenge:
    """What the client receives: an id and a question, never the answer"""
    captcha_id: str
    question: str

    def to_dict(self) -> dict:
        return {"captchaId": self.captcha_id, "question": self.question}


@dataclass
class CaptchaResult:
    valid: bool
    error: Optional[str] = None


def parse_answer(answer: Any) -> Optional[int]:
    """
    Normalize a submitted answer to an integer.
    Accepts ints and integral strings (surrounding whitespace allowed);
    anything else returns None.
    """
    if isinstance(answer, bool):
        return None
    if isinstance(answer, int):
        return answer
    if isinstance(answer, float):
        return int(answer) if answer.is_integer() else None
    if isinstance(answer, str):
        text = answer.strip()
        if _INT_RE.match(text):
            return int(text)
    return None


class CaptchaService:
    """
    Arithmetic captcha backed by a KeyValueStore.

    Keys are namespaced with "captcha:" so the store can be shared with other
    short-lived state.
    """
    KEY_PREFIX = "captcha:"

    def __init__(self, store: KeyValueStore, ttl_seconds: float, rng: Optional[random.Random] = None):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._rng = rng or random.SystemRandom()

    def _key(self, captcha_id: str) -> str:
        return f"{self.KEY_PREFIX}{captcha_id}"

    def _make_problem(self) -> tuple[str, int]:
        a = self._rng.randint(OPERAND_MIN, OPERAND_MAX)
        b = self._rng.randint(OPERAND_MIN, OPERAND_MAX)
        if self._rng.choice("+-") == "+":
            return f"What is {a} + {b}?", a + b
        # Larger operand first so the answer is never negative
        hi, lo = max(a, b), min(a, b)
        return f"What is {hi} - {lo}?", hi - lo

    def issue(self, question: str, answer: int) -> CaptchaChallenge:
        """Store a challenge with a known answer and return its public part"""
        captcha_id = new_token()
        self.store.set(self._key(captcha_id), {"question": question, "answer": int(answer)}, self.ttl_seconds)
        return CaptchaChallenge(captcha_id=captcha_id, question=question)

    def generate(self) -> CaptchaChallenge:
        question, answer = self._make_problem()
        return self.issue(question, answer)

    def validate(self, captcha_id: Optional[str], answer: Any) -> CaptchaResult:
        """
        Consume a challenge and check the answer.

        Never raises for unknown ids; absence is reported through the result.
        """
        if not captcha_id:
            return CaptchaResult(valid=False, error=ERR_NOT_FOUND)

        entry = self.store.pop(self._key(captcha_id))
        if entry is None:
            return CaptchaResult(valid=False, error=ERR_NOT_FOUND)
        if entry.is_expired(self.store.now()):
            return CaptchaResult(valid=False, error=ERR_EXPIRED)

        parsed = parse_answer(answer)
        if parsed is None:
            return CaptchaResult(valid=False, error=ERR_FORMAT)
        if parsed != entry.value["answer"]:
            return CaptchaResult(valid=False, error=ERR_INCORRECT)
        return CaptchaResult(valid=True)


captcha_service = CaptchaService(kv_store, ttl_seconds=settings.captcha_ttl_seconds)
