"""Unit tests for api/models.py request models -- trimming rules on auth bodies."""

import pytest
from pydantic import ValidationError

from api.models import LoginRequest, RegisterRequest


def test_register_trims_username_and_email():
    body = RegisterRequest(username="  alice ", email=" a@x.com  ", password="secret1")
    assert body.username == "alice"
    assert body.email == "a@x.com"


def test_register_keeps_password_as_sent():
    body = RegisterRequest(username="alice", email="a@x.com", password=" secret1 ")
    assert body.password == " secret1 "


def test_login_trims_email_and_keeps_password():
    body = LoginRequest(email="  a@x.com ", password=" secret1 ")
    assert body.email == "a@x.com"
    assert body.password == " secret1 "


def test_register_and_login_agree_on_credentials():
    raw = {"email": "\ta@x.com ", "password": "  pass word  "}
    registered = RegisterRequest(username="alice", **raw)
    login = LoginRequest(**raw)
    assert (registered.email, registered.password) == (login.email, login.password)


def test_username_length_checked_after_trim():
    with pytest.raises(ValidationError):
        RegisterRequest(username="  ab  ", email="a@x.com", password="secret1")
