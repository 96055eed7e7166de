"""
Purpose: Guardrails for credentials and outgoing prompts.
Content: early, predictable failures for blank fields; one place for email
normalization and password hashing so auth never touches bcrypt directly.
"""

from __future__ import annotations

import bcrypt

from ..errors import ValidationError

BCRYPT_ROUNDS = 10


class DefaultSecurity:
    def normalize_email(self, email: str) -> str:
        return (email or "").strip().lower()

    def validate_credentials(self, email: str, password: str) -> None:
        if not (email or "").strip() or not password:
            raise ValidationError("Email and password are required.")

    def validate_name(self, name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Please enter your name.")
        return cleaned

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), (password_hash or "").encode("utf-8")
            )
        except ValueError:
            # malformed stored hash
            return False

    def sanitize_for_prompt(self, text: str) -> str:
        return (text or "").replace("\x00", "").strip()
