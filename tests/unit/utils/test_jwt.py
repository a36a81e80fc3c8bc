from datetime import timedelta
from uuid import uuid4

from jose import jwt
from starlette.requests import Request

from config import ApplicationConfig
from src.api.utils.jwt import ALGORITHM, create_access_token, extract_token, hash_token, verify_token


def request_with(headers):
    raw = [(name.lower().encode(), value.encode()) for name, value in headers.items()]
    return Request({"type": "http", "headers": raw})


def test_round_trip_claims():
    user_id = uuid4()
    token = create_access_token(user_id, "a@example.com", timedelta(minutes=5))

    result = verify_token(token)

    assert result.is_ok()
    assert result.value.user_id == user_id
    assert result.value.token_id


def test_tokens_are_unique():
    user_id = uuid4()

    first = create_access_token(user_id, "a@example.com", timedelta(minutes=5))
    second = create_access_token(user_id, "a@example.com", timedelta(minutes=5))

    assert first != second
    assert hash_token(first) != hash_token(second)


def test_wrong_audience_is_invalid():
    token = jwt.encode(
        {"sub": str(uuid4()), "aud": "someone-else", "iss": ApplicationConfig.JWT_ISSUER},
        ApplicationConfig.JWT_SECRET,
        algorithm=ALGORITHM,
    )

    assert verify_token(token).error.code == "INVALID_TOKEN"


def test_wrong_secret_is_invalid():
    token = jwt.encode(
        {
            "sub": str(uuid4()),
            "aud": ApplicationConfig.JWT_AUDIENCE,
            "iss": ApplicationConfig.JWT_ISSUER,
        },
        "not-the-secret",
        algorithm=ALGORITHM,
    )

    assert verify_token(token).error.code == "INVALID_TOKEN"


def test_hash_is_sha256_hex():
    digest = hash_token("abc")

    assert len(digest) == 64
    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_extract_prefers_cookie():
    request = request_with(
        {"Cookie": f"{ApplicationConfig.AUTH_COOKIE_NAME}=from-cookie", "Authorization": "Bearer from-header"}
    )

    assert extract_token(request) == "from-cookie"


def test_extract_bearer_header():
    assert extract_token(request_with({"Authorization": "Bearer abc.def"})) == "abc.def"
    assert extract_token(request_with({"Authorization": "Basic abc"})) is None
    assert extract_token(request_with({})) is None
