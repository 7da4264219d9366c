import bcrypt

BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    bcrypt hashing for account passwords.

    Methods
    -------
    hash_password(plain_text: str) -> str
        Salted bcrypt hash, returned as text for the `users.password` column.
    verify_password(plain_text: str, stored_hash: str | None) -> bool
        True when `plain_text` matches `stored_hash`. Accounts created through
        Google sign-in have no stored hash and never match.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    @staticmethod
    def _encode(plain_text: str) -> bytes:
        # bcrypt ignores (newer releases reject) anything past 72 bytes
        return plain_text.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash_password(self, plain_text: str) -> str:
        return bcrypt.hashpw(self._encode(plain_text), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify_password(self, plain_text: str, stored_hash: str | None) -> bool:
        if not stored_hash or plain_text is None:
            return False
        try:
            return bcrypt.checkpw(self._encode(plain_text), stored_hash.encode("utf-8"))
        except ValueError:
            # not a bcrypt hash
            return False
