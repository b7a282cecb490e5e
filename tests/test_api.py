"""HTTP API: catalog, quote, selection actions and submission."""
import pytest
from fastapi.testclient import TestClient

from license_quote.api.main import app
from license_quote.services.display import EMAIL_ERROR


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


@pytest.fixture
def initial(client):
    response = client.get("/selection/initial")
    assert response.status_code == 200
    return response.json()["selection"]


def post(client, path, **payload):
    response = client.post(path, json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def item(selection, item_id):
    return next(i for i in selection["items"] if i["item_id"] == item_id)


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_catalog(client):
    body = client.get("/catalog").json()

    assert [i["item_id"] for i in body["items"]] == ["cert1", "cert2", "cert3"]
    security = body["items"][2]
    assert security["sub_options"][1]["min_quantity"] == 50
    assert security["sub_options"][1]["max_quantity"] == 130
    assert body["combo_rules"][0]["trigger_sub_option_ids"] == ["code-security", "secret-security"]


def test_initial_selection(client):
    body = client.get("/selection/initial").json()

    assert body["quote"]["total"] == 0
    assert body["quote"]["display"]["total"] == "$ 0"
    assert item(body["selection"], "cert3")["selected_sub_option_ids"] == ["code-security"]


def test_enable_item(client, initial):
    body = post(client, "/selection/enable", selection=initial, item_id="cert1", enabled=True)

    assert item(body["selection"], "cert1")["enabled"] is True
    assert body["quote"]["subtotal"] == 1050
    assert body["quote"]["total_licenses"] == 50
    assert body["quote"]["display"]["total"] == "$ 1.250"


def test_item_quantity_is_clamped(client, initial):
    body = post(client, "/selection/quantity", selection=initial, item_id="cert1", value=500)
    assert item(body["selection"], "cert1")["quantity"] == 130

    body = post(client, "/selection/quantity", selection=initial, item_id="cert1", value="abc")
    assert item(body["selection"], "cert1")["quantity"] == 50


def test_toggle_activates_combo(client, initial):
    selection = post(client, "/selection/enable", selection=initial, item_id="cert3", enabled=True)["selection"]
    body = post(client, "/selection/toggle", selection=selection, item_id="cert3", sub_option_id="secret-security")

    assert item(body["selection"], "cert3")["selected_sub_option_ids"] == ["code-security", "secret-security"]
    assert body["quote"]["subtotal"] == 2450
    assert body["quote"]["total_licenses"] == 50
    assert body["quote"]["display"]["lines"][0]["combo_rule_id"] == "GHAS-BUNDLE"


def test_select_only(client, initial):
    selection = post(client, "/selection/toggle", selection=initial, item_id="cert3", sub_option_id="secret-security")["selection"]
    body = post(client, "/selection/select-only", selection=selection, item_id="cert3", sub_option_id="secret-security")

    assert item(body["selection"], "cert3")["selected_sub_option_ids"] == ["secret-security"]


def test_sub_option_quantity_non_numeric(client, initial):
    body = post(client, "/selection/sub-option-quantity", selection=initial,
                item_id="cert3", sub_option_id="code-security", value="abc")

    assert item(body["selection"], "cert3")["sub_option_quantities"]["code-security"] == 30


def test_combo_quantity(client, initial):
    selection = post(client, "/selection/toggle", selection=initial, item_id="cert3", sub_option_id="secret-security")["selection"]
    body = post(client, "/selection/combo-quantity", selection=selection, item_id="cert3", value=100)

    assert item(body["selection"], "cert3")["sub_option_quantities"] == {"code-security": 100, "secret-security": 100}


def test_quote_normalises_input(client):
    selection = {"items": [
        {"item_id": "cert1", "enabled": True, "quantity": 9999},
        {"item_id": "ghost", "enabled": True, "quantity": 10},
    ]}
    body = post(client, "/quote", selection=selection)

    assert body["subtotal"] == 130 * 21
    assert body["total_licenses"] == 130


def test_submit_rejects_bad_email(client, initial):
    response = client.post("/quote/submit", json={"selection": initial, "email": "not-an-email"})

    assert response.status_code == 422
    assert response.json()["detail"] == EMAIL_ERROR


def test_submit(client, initial):
    selection = post(client, "/selection/enable", selection=initial, item_id="cert1", enabled=True)["selection"]
    body = post(client, "/quote/submit", selection=selection, email="buyer@example.com")

    assert body["email"] == "buyer@example.com"
    assert body["quote"]["total"] == pytest.approx(1249.5)


def test_quote_accepts_raw_quantity_input(client):
    selection = {"items": [
        {"item_id": "cert1", "enabled": True, "quantity": "abc"},
        {
            "item_id": "cert3",
            "enabled": True,
            "quantity": 75.5,
            "selected_sub_option_ids": ["code-security"],
            "sub_option_quantities": {"code-security": 75.5, "secret-security": "x"},
        },
    ]}
    body = post(client, "/quote", selection=selection)

    # cert1 falls back to its minimum of 50, code-security truncates to 75
    assert body["subtotal"] == 50 * 21 + 75 * 30
    assert body["total_licenses"] == 125


def test_selection_action_normalises_raw_quantities(client, initial):
    item(initial, "cert3")["sub_option_quantities"] = {"code-security": "999", "secret-security": None}
    body = post(client, "/selection/toggle", selection=initial, item_id="cert3", sub_option_id="secret-security")

    assert item(body["selection"], "cert3")["sub_option_quantities"] == {"code-security": 130, "secret-security": 50}
