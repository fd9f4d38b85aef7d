from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from comments_picker.webapp.app import SECRET_HEADER, setup_webapp

UPDATE = {
    "update_id": 1001,
    "message": {
        "message_id": 1,
        "date": 1760000000,
        "chat": {"id": -100200, "type": "supergroup", "title": "Discussion"},
        "from": {"id": 5, "is_bot": False, "first_name": "Ann"},
        "text": "/winnerlist",
    },
}


@pytest.fixture
def dispatcher():
    dp = MagicMock()
    dp.feed_update = AsyncMock()
    return dp


@pytest.fixture
def client(settings, dispatcher):
    webhook_settings = replace(settings, webhook_host="https://bot.example.com", webhook_secret="s3cret")
    app = setup_webapp(MagicMock(), dispatcher, webhook_settings)
    with TestClient(app) as client:
        yield client


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "OK"


def test_webhook_rejects_wrong_secret(client, settings, dispatcher):
    response = client.post(settings.webhook_path, json=UPDATE, headers={SECRET_HEADER: "nope"})

    assert response.status_code == 403
    dispatcher.feed_update.assert_not_called()


def test_webhook_feeds_update(client, settings, dispatcher):
    response = client.post(settings.webhook_path, json=UPDATE, headers={SECRET_HEADER: "s3cret"})

    assert response.status_code == 200
    dispatcher.feed_update.assert_called_once()
    update = dispatcher.feed_update.call_args.args[1]
    assert update.update_id == 1001
    assert update.message.text == "/winnerlist"


def test_webhook_rejects_garbage(client, settings, dispatcher):
    response = client.post(settings.webhook_path, content=b"not json", headers={SECRET_HEADER: "s3cret"})

    assert response.status_code == 400
    dispatcher.feed_update.assert_not_called()


def test_polling_mode_serves_only_health_check(settings, dispatcher):
    # Без WEBHOOK_HOST обновления принимаются только через getUpdates
    app = setup_webapp(MagicMock(), dispatcher, replace(settings, webhook_host="", webhook_secret=""))
    forged = dict(UPDATE, message=dict(UPDATE["message"], text="/approve", **{"from": {
        "id": settings.owner_id, "is_bot": False, "first_name": "Owner"}}))

    with TestClient(app) as client:
        assert client.get("/").text == "OK"
        response = client.post(settings.webhook_path, json=forged)

    assert response.status_code in (404, 405)
    dispatcher.feed_update.assert_not_called()


def test_webhook_mode_requires_secret(settings, dispatcher):
    with pytest.raises(ValueError):
        setup_webapp(MagicMock(), dispatcher, replace(settings, webhook_host="https://bot.example.com",
                                                      webhook_secret=""))
