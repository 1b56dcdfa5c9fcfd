"""Brute-force lockout policy."""


def is_locked_out(failed_login_attempts: int, max_attempts: int) -> bool:
    """Return True when an account must be refused before its password is checked.

    The comparison is ``>=``: with ``max_attempts=5`` the fifth failure still
    reports invalid credentials and every attempt after it is rate limited,
    whatever password is supplied.
    """
    return failed_login_attempts >= max_attempts
