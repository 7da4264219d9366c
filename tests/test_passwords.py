from portal.crypt.passwords import PasswordHasher


def test_hash_and_verify():
    hasher = PasswordHasher(rounds=4)
    stored = hasher.hash_password("correct horse")

    assert stored != "correct horse"
    assert hasher.verify_password("correct horse", stored)
    assert not hasher.verify_password("wrong horse", stored)


def test_accounts_without_hash_never_match():
    hasher = PasswordHasher(rounds=4)

    assert not hasher.verify_password("anything", None)
    assert not hasher.verify_password("anything", "not-a-bcrypt-hash")
