import pytest
from httpx import AsyncClient

DESIGN_URL = "/api/v1/design/"

@pytest.mark.asyncio
async def test_defaults_when_nothing_saved(test_client: AsyncClient, auth_headers_user):
    response = await test_client.get(DESIGN_URL, headers=auth_headers_user)

    assert response.status_code == 200
    body = response.json()
    assert body["company"]["company_name"] == "Sua Empresa"
    assert body["proposal_design"]["accent_color"] == "#FF4B4B"

@pytest.mark.asyncio
async def test_save_then_read_is_per_user(test_client: AsyncClient, auth_headers_user, auth_headers_user_2):
    payload = {
        "company": {"company_name": "Acme", "logo_url": "https://cdn.example.com/logo.png"},
        "proposal_design": {"header_layout": "center", "font_size": "large"},
    }

    saved = await test_client.put(DESIGN_URL, json=payload, headers=auth_headers_user)
    own = await test_client.get(DESIGN_URL, headers=auth_headers_user)
    other = await test_client.get(DESIGN_URL, headers=auth_headers_user_2)

    assert saved.status_code == 200
    assert own.json()["company"]["company_name"] == "Acme"
    assert own.json()["proposal_design"]["header_layout"] == "center"
    assert own.json()["proposal_design"]["font_size"] == "large"
    assert other.json()["company"]["company_name"] == "Sua Empresa"

@pytest.mark.asyncio
async def test_second_save_overwrites(test_client: AsyncClient, auth_headers_user):
    await test_client.put(DESIGN_URL, json={"company": {"company_name": "Primeira"}}, headers=auth_headers_user)
    await test_client.put(DESIGN_URL, json={"company": {"company_name": "Segunda"}}, headers=auth_headers_user)

    response = await test_client.get(DESIGN_URL, headers=auth_headers_user)

    assert response.json()["company"]["company_name"] == "Segunda"

@pytest.mark.asyncio
async def test_invalid_color_rejected(test_client: AsyncClient, auth_headers_user):
    payload = {"proposal_design": {"accent_color": "vermelho"}}
    response = await test_client.put(DESIGN_URL, json=payload, headers=auth_headers_user)
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_design_requires_token(test_client: AsyncClient):
    response = await test_client.get(DESIGN_URL)
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_design_options_list_offered_values(test_client: AsyncClient):
    response = await test_client.get(f"{DESIGN_URL}options")

    assert response.status_code == 200
    body = response.json()
    assert body["fonts"][0] == "DM Sans"
    assert "JetBrains Mono" in body["mono_fonts"]
    assert set(body["font_sizes"]) == {"small", "medium", "large"}
    assert body["font_sizes"]["medium"]["body"] == 9.5
    assert body["header_layouts"] == ["left", "center", "right"]
    assert body["paper_sizes"] == ["A4", "Letter"]
