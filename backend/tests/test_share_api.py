"""
HTTP tests for itinerary and chat sharing
"""

from datetime import timedelta
from uuid import uuid4

from sqlalchemy import update

from wander.db.models import Chat, SharedChat, utcnow

PREFIX = "/api/v1"

BODY = {
    "title": "Ladakh ride",
    "pins": [{"latitude": 34.15, "longitude": 77.57, "title": "Leh"}],
}


async def _itinerary(client, headers):
    response = await client.post(f"{PREFIX}/itineraries", json=BODY, headers=headers)
    return response.json()["data"]["itinerary"]["id"]


async def _chat(db_manager, user_id):
    async with db_manager.get_session() as session:
        chat = Chat(user_id=user_id, title="Trip ideas")
        session.add(chat)
        await session.commit()
        return chat.id


class TestShareItinerary:

    async def test_owner_shares_and_itinerary_becomes_public(self, client, owner_id, auth_headers):
        itinerary_id = await _itinerary(client, auth_headers(owner_id))

        response = await client.post(
            f"{PREFIX}/share/itinerary", json={"itineraryId": itinerary_id}, headers=auth_headers(owner_id)
        )

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "shareLink": f"https://wander.test/shared/itinerary/{itinerary_id}",
            "itineraryId": itinerary_id,
        }
        shared = await client.get(f"{PREFIX}/itineraries/shared/{itinerary_id}")
        assert shared.status_code == 200
        assert shared.json()["isPublic"] is True

    async def test_non_owner_cannot_share(self, client, owner_id, other_id, auth_headers):
        itinerary_id = await _itinerary(client, auth_headers(owner_id))

        response = await client.post(
            f"{PREFIX}/share/itinerary", json={"itineraryId": itinerary_id}, headers=auth_headers(other_id)
        )

        assert response.status_code == 403
        still_private = await client.get(f"{PREFIX}/itineraries/shared/{itinerary_id}")
        assert still_private.status_code == 404

    async def test_unknown_itinerary(self, client, owner_id, auth_headers):
        response = await client.post(
            f"{PREFIX}/share/itinerary", json={"itineraryId": str(uuid4())}, headers=auth_headers(owner_id)
        )
        assert response.status_code == 404

    async def test_missing_itinerary_id(self, client, owner_id, auth_headers):
        response = await client.post(f"{PREFIX}/share/itinerary", json={}, headers=auth_headers(owner_id))
        assert response.status_code == 400

    async def test_requires_authentication(self, client):
        response = await client.post(f"{PREFIX}/share/itinerary", json={"itineraryId": str(uuid4())})
        assert response.status_code == 401


class TestShareChat:

    async def test_shared_chat_is_readable_until_expiry(self, client, db_manager, owner_id, auth_headers):
        chat_id = await _chat(db_manager, owner_id)

        response = await client.post(
            f"{PREFIX}/share/chat", json={"chatId": str(chat_id)}, headers=auth_headers(owner_id)
        )

        assert response.status_code == 200
        share_id = response.json()["shareId"]
        assert response.json()["shareLink"] == f"https://wander.test/shared/chat/{share_id}"

        shared = await client.get(f"{PREFIX}/shared/chats/{share_id}")
        assert shared.status_code == 200
        assert shared.json()["chatId"] == str(chat_id)
        assert shared.json()["messages"] == []

    async def test_expired_share_is_gone(self, client, db_manager, owner_id, auth_headers):
        chat_id = await _chat(db_manager, owner_id)
        response = await client.post(
            f"{PREFIX}/share/chat", json={"chatId": str(chat_id)}, headers=auth_headers(owner_id)
        )
        share_id = response.json()["shareId"]

        async with db_manager.get_session() as session:
            await session.execute(
                update(SharedChat)
                .where(SharedChat.chat_id == chat_id)
                .values(expires_at=utcnow() - timedelta(days=1))
            )
            await session.commit()

        expired = await client.get(f"{PREFIX}/shared/chats/{share_id}")
        assert expired.status_code == 410

    async def test_unknown_share_is_not_found(self, client):
        response = await client.get(f"{PREFIX}/shared/chats/{uuid4()}")
        assert response.status_code == 404

    async def test_only_owner_can_share_chat(self, client, db_manager, owner_id, other_id, auth_headers):
        chat_id = await _chat(db_manager, owner_id)

        response = await client.post(
            f"{PREFIX}/share/chat", json={"chatId": str(chat_id)}, headers=auth_headers(other_id)
        )
        assert response.status_code == 403

    async def test_unknown_chat(self, client, owner_id, auth_headers):
        response = await client.post(
            f"{PREFIX}/share/chat", json={"chatId": str(uuid4())}, headers=auth_headers(owner_id)
        )
        assert response.status_code == 404
