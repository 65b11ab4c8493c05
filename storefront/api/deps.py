# storefront/api/deps.py
from fastapi import Header


def get_current_user_id(x_user_id: int | None = Header(None)) -> int | None:
    """
    Id użytkownika przekazane przez dostawcę tożsamości (np. reverse proxy po zalogowaniu).
    None oznacza anonimowe żądanie, serwisy odpowiadają wtedy UnauthenticatedError.
    """
    return x_user_id
