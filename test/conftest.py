import email.message

import pytest

import ldacore.logging


def generate_email(**headers):
    m = email.message.EmailMessage()
    m.set_content("Hello World!\nFrom the second line\n")
    m["Subject"] = "Hello World"
    m["From"] = "from@example.com"
    m["To"] = "to@example.com"
    m["Delivered-To"] = "to@example.com"
    for (name, value) in headers.items():
        m[name.replace('_', '-')] = value
    return m.as_bytes()


MBOX_MESSAGE = (
    b"From sender@example.org Mon Oct 19 13:55:01 2026\n"
    b"Return-Path: <sender@example.org>\n"
    b"Subject: quoted\n"
    b"\n"
    b"line one\n"
    b"From here\n"
    b">From there\n"
)


@pytest.fixture
def email_bytes():
    return generate_email()


@pytest.fixture
def mbox_message():
    return MBOX_MESSAGE


@pytest.fixture(autouse=True)
def logger():
    log = ldacore.logging.Logger()
    log.clearhandlers()
    yield log
    log.clearhandlers()
