"""
The `crypt` package provides the password utilities used by the
authentication workflows.

Contents
--------
- passwords
    `PasswordHasher`: bcrypt `hash_password` / `verify_password`.
"""
