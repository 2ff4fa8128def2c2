"""HTTP tests for the design endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from sole_api.core.errors import ImageGenerationAppError

GENERATE_BODY = {
    "basePrompt": "low-top court sneaker",
    "style": "retro",
    "colors": ["#FF0000", "#FFFFFF"],
}


def _generate(client: TestClient, headers: dict[str, str], **overrides) -> dict:
    resp = client.post("/api/v1/designs", json={**GENERATE_BODY, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_generate_design(client: TestClient, auth_headers, image_generator):
    body = _generate(client, auth_headers)

    assert body["imageUrl"] == image_generator.url
    assert body["style"] == "retro"
    assert body["colors"] == ["#FF0000", "#FFFFFF"]
    assert body["prompt"].startswith("low-top court sneaker, retro")
    assert body["metadataUri"] is None
    assert body["tokenId"] is None
    assert len(image_generator.calls) == 1


def test_generate_design_requires_auth(client: TestClient, image_generator):
    resp = client.post("/api/v1/designs", json=GENERATE_BODY)

    assert resp.status_code == 401
    assert image_generator.calls == []


def test_generate_design_invalid_style(client: TestClient, auth_headers):
    resp = client.post(
        "/api/v1/designs",
        json={**GENERATE_BODY, "style": "gothic"},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "design_style_invalid"


def test_generate_design_too_many_colors(client: TestClient, auth_headers):
    resp = client.post(
        "/api/v1/designs",
        json={**GENERATE_BODY, "colors": ["#000000"] * 11},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_generate_design_provider_failure_is_bad_gateway(client: TestClient, auth_headers, image_generator, monkeypatch):
    async def failing(prompt, negative_prompt=None):
        raise ImageGenerationAppError(code="image_provider_unavailable", message="down")

    monkeypatch.setattr(image_generator, "generate_image", failing)

    resp = client.post("/api/v1/designs", json=GENERATE_BODY, headers=auth_headers)

    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "image_provider_unavailable"
    assert client.get("/api/v1/designs").json()["pagination"]["total"] == 0


def test_get_design_by_id(client: TestClient, auth_headers):
    created = _generate(client, auth_headers)

    resp = client.get(f"/api/v1/designs/{created['id']}")

    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


def test_get_design_not_found(client: TestClient):
    resp = client.get("/api/v1/designs/does-not-exist")

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "design_not_found"


def test_list_designs_paginated(client: TestClient, auth_headers):
    for _ in range(3):
        _generate(client, auth_headers)

    resp = client.get("/api/v1/designs", params={"page": 2, "pageSize": 2})

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"page": 2, "pageSize": 2, "total": 3, "totalPages": 2}
    assert "count" not in body


def test_list_designs_rejects_oversized_page(client: TestClient):
    resp = client.get("/api/v1/designs", params={"pageSize": 500})

    assert resp.status_code == 400


def test_list_designs_filtered_by_style(client: TestClient, auth_headers):
    _generate(client, auth_headers, style="retro")
    _generate(client, auth_headers, style="sporty")

    resp = client.get("/api/v1/designs", params={"style": "sporty"})

    body = resp.json()
    assert body["count"] == 1
    assert body["data"][0]["style"] == "sporty"
    assert "pagination" not in body


def test_list_user_designs(client: TestClient, auth_headers, register, login):
    mine = _generate(client, auth_headers)
    register(email="other@example.com", username="other")
    _generate(client, login(email="other@example.com"))

    resp = client.get(f"/api/v1/designs/user/{mine['userId']}")

    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()] == [mine["id"]]


def test_link_nft_by_owner(client: TestClient, auth_headers):
    created = _generate(client, auth_headers)

    resp = client.put(
        f"/api/v1/designs/{created['id']}/nft",
        json={"metadataUri": "ipfs://QmSneaker", "tokenId": 42},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["metadataUri"] == "ipfs://QmSneaker"
    assert resp.json()["tokenId"] == 42
    assert client.get(f"/api/v1/designs/{created['id']}").json()["tokenId"] == 42


def test_link_nft_by_other_user_is_forbidden(client: TestClient, auth_headers, register, login):
    created = _generate(client, auth_headers)
    register(email="other@example.com", username="other")

    resp = client.put(
        f"/api/v1/designs/{created['id']}/nft",
        json={"metadataUri": "ipfs://QmSneaker", "tokenId": 42},
        headers=login(email="other@example.com"),
    )

    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "design_not_owned"


def test_link_nft_rejects_negative_token(client: TestClient, auth_headers):
    created = _generate(client, auth_headers)

    resp = client.put(
        f"/api/v1/designs/{created['id']}/nft",
        json={"metadataUri": "ipfs://QmSneaker", "tokenId": -1},
        headers=auth_headers,
    )

    assert resp.status_code == 400


def test_generate_variations(client: TestClient, auth_headers, image_generator):
    resp = client.post(
        "/api/v1/designs/variations",
        json={**GENERATE_BODY, "count": 3},
        headers=auth_headers,
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert len(body) == 3
    assert len({design["id"] for design in body}) == 3
    assert all(design["imageUrl"] == image_generator.url for design in body)
    assert len(image_generator.calls) == 3
    assert client.get("/api/v1/designs").json()["pagination"]["total"] == 3


def test_generate_variations_keeps_successful_generations(
    client: TestClient, auth_headers, image_generator, monkeypatch
):
    outcomes = iter([True, False, True])

    async def flaky(prompt, negative_prompt=None):
        if not next(outcomes):
            raise ImageGenerationAppError(code="image_provider_unavailable", message="down")
        return image_generator.url

    monkeypatch.setattr(image_generator, "generate_image", flaky)

    resp = client.post(
        "/api/v1/designs/variations",
        json={**GENERATE_BODY, "count": 3},
        headers=auth_headers,
    )

    assert resp.status_code == 201, resp.text
    assert len(resp.json()) == 2


def test_generate_variations_all_failed_is_bad_gateway(
    client: TestClient, auth_headers, image_generator, monkeypatch
):
    async def failing(prompt, negative_prompt=None):
        raise ImageGenerationAppError(code="image_provider_unavailable", message="down")

    monkeypatch.setattr(image_generator, "generate_image", failing)

    resp = client.post(
        "/api/v1/designs/variations",
        json={**GENERATE_BODY, "count": 2},
        headers=auth_headers,
    )

    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "image_provider_unavailable"


def test_generate_variations_count_is_bounded(client: TestClient, auth_headers):
    resp = client.post(
        "/api/v1/designs/variations",
        json={**GENERATE_BODY, "count": 5},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"
