"""
Testes para autenticação JWT do Supabase
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from jose import jwt

from ecologic.core.auth import decode_access_token
from ecologic.core.config import settings


def make_token(sub="0b7c1d7e-auth-user", expires_in=timedelta(hours=1), secret=None, audience="authenticated"):
    payload = {
        "sub": sub,
        "aud": audience,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def test_decode_valid_token():
    payload = decode_access_token(make_token())
    assert payload["sub"] == "0b7c1d7e-auth-user"


@pytest.mark.parametrize("token", [
    "invalid_token",
    make_token(secret="outro-segredo"),
    make_token(expires_in=timedelta(minutes=-5)),
    make_token(audience="anon"),
])
def test_invalid_tokens_are_rejected(token):
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)
    assert exc_info.value.status_code == 401


def test_request_with_valid_token(anonymous_client, consultor, make_quote):
    quote = make_quote()

    response = anonymous_client.get(
        f"/api/quotes/{quote.solicitacao_id}",
        headers={"Authorization": f"Bearer {make_token()}"},
    )

    assert response.status_code == 200


def test_request_with_expired_token(anonymous_client, consultor, make_quote):
    quote = make_quote()

    response = anonymous_client.get(
        f"/api/quotes/{quote.solicitacao_id}",
        headers={"Authorization": f"Bearer {make_token(expires_in=timedelta(minutes=-5))}"},
    )

    assert response.status_code == 401


def test_unknown_consultor(anonymous_client, consultor, make_quote):
    quote = make_quote()

    response = anonymous_client.get(
        f"/api/quotes/{quote.solicitacao_id}",
        headers={"Authorization": f"Bearer {make_token(sub='outro-usuario')}"},
    )

    assert response.status_code == 401


def test_inactive_consultor(anonymous_client, consultor, db, make_quote):
    consultor.ativo = False
    db.commit()
    quote = make_quote()

    response = anonymous_client.get(
        f"/api/quotes/{quote.solicitacao_id}",
        headers={"Authorization": f"Bearer {make_token()}"},
    )

    assert response.status_code == 403

