"""
Tests for reserving and canceling sheets, and the user's page.
"""

import pytest
from httpx import AsyncClient


async def reserve(client: AsyncClient, event_id: int, rank: str):
    return await client.post(f"/api/events/{event_id}/actions/reserve", json={"sheet_rank": rank})


async def cancel(client: AsyncClient, event_id: int, rank: str, num):
    return await client.delete(f"/api/events/{event_id}/sheets/{rank}/{num}/reservation")


@pytest.mark.asyncio
async def test_reserve_sheet(user_client: AsyncClient, public_event):
    response = await reserve(user_client, public_event.id, "B")
    assert response.status_code == 202
    data = response.json()
    assert data["sheet_rank"] == "B"
    assert 1 <= data["sheet_num"] <= 300
    assert isinstance(data["id"], int)

    event = (await user_client.get(f"/api/events/{public_event.id}")).json()
    assert event["remains"] == 999
    assert event["sheets"]["B"]["remains"] == 299
    sheet = event["sheets"]["B"]["detail"][data["sheet_num"] - 1]
    assert sheet["reserved"] is True
    assert sheet["mine"] is True


@pytest.mark.asyncio
async def test_reserve_requires_login(client: AsyncClient, public_event):
    response = await reserve(client, public_event.id, "S")
    assert response.status_code == 401
    assert response.json() == {"error": "login_required"}


@pytest.mark.asyncio
@pytest.mark.parametrize("rank", ["D", "s", ""])
async def test_reserve_invalid_rank(user_client: AsyncClient, public_event, rank):
    response = await reserve(user_client, public_event.id, rank)
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_rank"}


@pytest.mark.asyncio
async def test_reserve_without_rank(user_client: AsyncClient, public_event):
    response = await user_client.post(f"/api/events/{public_event.id}/actions/reserve", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_rank"}


@pytest.mark.asyncio
async def test_reserve_private_event(user_client: AsyncClient, private_event):
    response = await reserve(user_client, private_event.id, "S")
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_event"}


@pytest.mark.asyncio
async def test_reserve_closed_event(user_client: AsyncClient, closed_event):
    response = await reserve(user_client, closed_event.id, "S")
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_event"}


@pytest.mark.asyncio
async def test_reserve_missing_event(user_client: AsyncClient):
    response = await reserve(user_client, 99999, "S")
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_event"}


@pytest.mark.asyncio
async def test_reserve_sold_out(user_client: AsyncClient, public_event, other_user, reserve_directly):
    await reserve_directly(public_event, other_user, range(1, 51))

    response = await reserve(user_client, public_event.id, "S")
    assert response.status_code == 409
    assert response.json() == {"error": "sold_out"}

    # Other ranks are unaffected
    response = await reserve(user_client, public_event.id, "A")
    assert response.status_code == 202


@pytest.mark.asyncio
async def test_reserve_never_hands_out_taken_sheet(user_client: AsyncClient, public_event, other_user, reserve_directly):
    # Leave only S-50 free
    await reserve_directly(public_event, other_user, range(1, 50))

    response = await reserve(user_client, public_event.id, "S")
    assert response.status_code == 202
    assert response.json()["sheet_num"] == 50


@pytest.mark.asyncio
async def test_cancel_reservation(user_client: AsyncClient, public_event):
    data = (await reserve(user_client, public_event.id, "C")).json()

    response = await cancel(user_client, public_event.id, "C", data["sheet_num"])
    assert response.status_code == 204

    event = (await user_client.get(f"/api/events/{public_event.id}")).json()
    assert event["remains"] == 1000
    assert event["sheets"]["C"]["remains"] == 500


@pytest.mark.asyncio
async def test_cancel_twice(user_client: AsyncClient, public_event):
    data = (await reserve(user_client, public_event.id, "C")).json()
    await cancel(user_client, public_event.id, "C", data["sheet_num"])

    response = await cancel(user_client, public_event.id, "C", data["sheet_num"])
    assert response.status_code == 400
    assert response.json() == {"error": "not_reserved"}


@pytest.mark.asyncio
async def test_cancel_frees_sheet_for_others(
    user_client: AsyncClient, other_user_client: AsyncClient, public_event, other_user, reserve_directly
):
    # Only S-1 is left; take it, give it back, and let someone else get it
    await reserve_directly(public_event, other_user, range(2, 51))
    assert (await reserve(user_client, public_event.id, "S")).json()["sheet_num"] == 1
    assert (await reserve(other_user_client, public_event.id, "S")).status_code == 409

    await cancel(user_client, public_event.id, "S", 1)

    response = await reserve(other_user_client, public_event.id, "S")
    assert response.status_code == 202
    assert response.json()["sheet_num"] == 1


@pytest.mark.asyncio
async def test_cancel_requires_login(client: AsyncClient, public_event):
    response = await cancel(client, public_event.id, "S", 1)
    assert response.status_code == 401
    assert response.json() == {"error": "login_required"}


@pytest.mark.asyncio
async def test_cancel_not_reserved(user_client: AsyncClient, public_event):
    response = await cancel(user_client, public_event.id, "S", 1)
    assert response.status_code == 400
    assert response.json() == {"error": "not_reserved"}


@pytest.mark.asyncio
async def test_cancel_someone_elses_reservation(
    user_client: AsyncClient, public_event, other_user, reserve_directly
):
    await reserve_directly(public_event, other_user, [1])

    response = await cancel(user_client, public_event.id, "S", 1)
    assert response.status_code == 403
    assert response.json() == {"error": "not_permitted"}


@pytest.mark.asyncio
async def test_cancel_invalid_rank(user_client: AsyncClient, public_event):
    response = await cancel(user_client, public_event.id, "X", 1)
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_rank"}


@pytest.mark.asyncio
@pytest.mark.parametrize("num", ["0", "51", "abc", "3_0", "%207", "%D9%A1%D9%A0"])
async def test_cancel_invalid_sheet(user_client: AsyncClient, public_event, num):
    response = await cancel(user_client, public_event.id, "S", num)
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_sheet"}


@pytest.mark.asyncio
async def test_cancel_with_underscored_num_leaves_reservation(
    user_client: AsyncClient, public_event, test_user, reserve_directly
):
    await reserve_directly(public_event, test_user, [30])

    response = await cancel(user_client, public_event.id, "S", "3_0")
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_sheet"}

    event = (await user_client.get(f"/api/events/{public_event.id}")).json()
    assert event["sheets"]["S"]["detail"][29]["reserved"] is True


@pytest.mark.asyncio
async def test_cancel_on_private_event(user_client: AsyncClient, private_event):
    response = await cancel(user_client, private_event.id, "S", 1)
    assert response.status_code == 404
    assert response.json() == {"error": "invalid_event"}


@pytest.mark.asyncio
async def test_user_page(user_client: AsyncClient, test_user, public_event):
    first = (await reserve(user_client, public_event.id, "S")).json()
    second = (await reserve(user_client, public_event.id, "C")).json()
    await cancel(user_client, public_event.id, "S", first["sheet_num"])

    response = await user_client.get(f"/api/users/{test_user.id}")
    assert response.status_code == 200
    data = response.json()

    assert data["id"] == test_user.id
    assert data["nickname"] == "Sonic"
    # Only the active C reservation counts: 1000 + 0
    assert data["total_price"] == 1000

    reservations = {r["id"]: r for r in data["recent_reservations"]}
    assert set(reservations) == {first["id"], second["id"]}

    canceled = reservations[first["id"]]
    assert canceled["sheet_rank"] == "S"
    assert canceled["sheet_num"] == first["sheet_num"]
    assert canceled["price"] == 6000
    assert isinstance(canceled["canceled_at"], int)
    assert canceled["event"]["id"] == public_event.id
    assert "sheets" not in canceled["event"]

    active = reservations[second["id"]]
    assert active["price"] == 1000
    assert "canceled_at" not in active

    assert [event["id"] for event in data["recent_events"]] == [public_event.id]
    recent_event = data["recent_events"][0]
    assert recent_event["remains"] == 999
    assert "detail" not in recent_event["sheets"]["C"]


@pytest.mark.asyncio
async def test_user_page_limits_to_five(user_client: AsyncClient, test_user, public_event):
    for _ in range(7):
        assert (await reserve(user_client, public_event.id, "C")).status_code == 202

    data = (await user_client.get(f"/api/users/{test_user.id}")).json()
    assert len(data["recent_reservations"]) == 5
    assert data["total_price"] == 7 * 1000


@pytest.mark.asyncio
async def test_user_page_empty(user_client: AsyncClient, test_user):
    data = (await user_client.get(f"/api/users/{test_user.id}")).json()
    assert data["recent_reservations"] == []
    assert data["recent_events"] == []
    assert data["total_price"] == 0


@pytest.mark.asyncio
async def test_user_page_of_another_user(user_client: AsyncClient, other_user):
    response = await user_client.get(f"/api/users/{other_user.id}")
    assert response.status_code == 403
    assert response.json() == {"error": "forbidden"}


@pytest.mark.asyncio
async def test_user_page_requires_login(client: AsyncClient, test_user):
    response = await client.get(f"/api/users/{test_user.id}")
    assert response.status_code == 401
    assert response.json() == {"error": "login_required"}
