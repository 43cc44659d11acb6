# tests/test_auth_blueprint.py
import logging

from cloudvault_app.services.audit import AUDIT_LOGGER

from conftest import PASSWORD, register


def _register(client, **kw):
    data = dict(username="alice", password=PASSWORD, confirm=PASSWORD,
                full_name="Alice Liddell", age="30", gender="F")
    data.update(kw)
    return client.post("/register", json=data)


def test_register_and_login(client):
    r = _register(client)
    assert r.status_code == 201
    assert r.get_json()["message"] == "Account created. Welcome, Ms. Alice Liddell!"

    r = client.post("/login", json={"username": "alice", "password": PASSWORD})
    assert r.status_code == 200
    user = r.get_json()["user"]
    assert user["username"] == "alice"
    assert user["role"] == "Basic User"
    assert user["storage"]["limit"] == "1.0 GB"
    assert user["last_login"] is not None


def test_register_accepts_form_data(client):
    r = client.post("/register", data={
        "username": "carol", "password": PASSWORD, "confirm": PASSWORD,
        "full_name": "Carol", "age": "55", "gender": "F",
    })
    assert r.status_code == 201
    assert "Ma'am Carol" in r.get_json()["message"]


def test_register_errors_are_json(client):
    r = _register(client, password="weak")
    assert r.status_code == 400
    assert r.get_json()["error"] == "weak_password"

    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 409
    assert r.get_json() == {"error": "duplicate_username", "message": "Username already exists."}


def test_bad_login_then_lockout(client):
    _register(client)
    for _ in range(4):
        r = client.post("/login", json={"username": "alice", "password": "wrong-pass-1"})
        assert r.status_code == 401
        assert r.get_json()["error"] == "bad_credentials"
    r = client.post("/login", json={"username": "alice", "password": "wrong-pass-1"})
    assert r.status_code == 423
    r = client.post("/login", json={"username": "alice", "password": PASSWORD})
    assert r.status_code == 423
    assert r.get_json()["error"] == "account_locked"


def test_unknown_user(client):
    r = client.post("/login", json={"username": "ghost", "password": PASSWORD})
    assert r.status_code == 401
    assert r.get_json()["error"] == "bad_credentials"


def test_account_and_logout(logged_client_user):
    r = logged_client_user.get("/account")
    assert r.status_code == 200
    assert r.get_json()["salutation"] == "Sir"

    assert logged_client_user.post("/logout").get_json() == {"status": "logged_out"}
    assert logged_client_user.get("/account").status_code == 401
    # logging out twice is fine
    assert logged_client_user.post("/logout").status_code == 200


def test_mfa_flow(logged_client_user):
    r = logged_client_user.post("/account/mfa")
    assert r.get_json() == {"mfa_enabled": True}
    logged_client_user.post("/logout")

    r = logged_client_user.post("/login", json={"username": "bob", "password": PASSWORD})
    assert r.status_code == 202
    body = r.get_json()
    assert body["status"] == "mfa_required"
    code = body["code"]
    assert len(code) == 6 and code.isdigit()

    wrong = "000000" if code != "000000" else "111111"
    r = logged_client_user.post("/login/mfa", json={"code": wrong})
    assert r.status_code == 401
    assert r.get_json()["error"] == "mfa_failed"

    r = logged_client_user.post("/login", json={"username": "bob", "password": PASSWORD})
    r = logged_client_user.post("/login/mfa", json={"code": r.get_json()["code"]})
    assert r.status_code == 200
    assert r.get_json()["user"]["mfa_enabled"] is True


def test_upgrade(logged_client_user):
    r = logged_client_user.post("/account/upgrade")
    assert r.get_json() == {"status": "upgraded", "role": "Premium User"}
    r = logged_client_user.post("/account/upgrade")
    assert r.status_code == 409
    assert r.get_json()["error"] == "already_max_tier"


def test_audit_log_file(app, client):
    _register(client)
    client.post("/login", json={"username": "alice", "password": PASSWORD})
    for h in logging.getLogger(AUDIT_LOGGER).handlers:
        h.flush()
    with open(app.config["AUDIT_LOG_FILE"], encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert lines[0].endswith("[SYSTEM] Application started")
    assert lines[-2].endswith("[REGISTER] User=alice")
    assert lines[-1].endswith("[LOGIN_SUCCESS] User=alice")
    assert lines[-1].startswith("[20")


# ---------------- one login per client ----------------
def test_login_does_not_leak_to_other_clients(app, logged_client_admin):
    logged_client_admin.post("/files", json={"name": "secret.pdf", "size_mb": 1})

    stranger = app.test_client()
    assert stranger.get("/files").status_code == 401
    assert stranger.get("/admin/dashboard").status_code == 401
    assert stranger.delete("/files/1").status_code == 401

    # the admin's own client is unaffected
    r = logged_client_admin.get("/files")
    assert [f["name"] for f in r.get_json()["files"]] == ["secret.pdf"]


def test_two_clients_see_their_own_files(app, app_engine):
    for name in ("alice", "carol"):
        register(app_engine, name, full_name=name.title())
    a, c = app.test_client(), app.test_client()
    a.post("/login", json={"username": "alice", "password": PASSWORD})
    c.post("/login", json={"username": "carol", "password": PASSWORD})
    a.post("/files", json={"name": "a.txt", "size_mb": 1})
    c.post("/files", json={"name": "c.txt", "size_mb": 2})

    assert [f["name"] for f in a.get("/files").get_json()["files"]] == ["a.txt"]
    assert [f["name"] for f in c.get("/files").get_json()["files"]] == ["c.txt"]
    assert a.get("/account").get_json()["username"] == "alice"

    # logging one client out leaves the other logged in
    c.post("/logout")
    assert c.get("/files").status_code == 401
    assert a.get("/files").status_code == 200


def test_mfa_code_only_works_for_the_client_that_logged_in(app, app_engine):
    register(app_engine, "carol", full_name="Carol C")
    carol = app_engine.login("carol", PASSWORD)
    app_engine.toggle_mfa(carol)

    owner, other = app.test_client(), app.test_client()
    code = owner.post("/login", json={"username": "carol", "password": PASSWORD}).get_json()["code"]

    r = other.post("/login/mfa", json={"code": code})
    assert r.status_code == 401
    assert r.get_json()["error"] == "not_logged_in"
    assert other.get("/account").status_code == 401

    r = owner.post("/login/mfa", json={"code": code})
    assert r.status_code == 200
    assert r.get_json()["user"]["username"] == "carol"


def test_other_logins_keep_pending_mfa(app, app_engine, client):
    register(app_engine, "carol", full_name="Carol C")
    carol = app_engine.login("carol", PASSWORD)
    app_engine.toggle_mfa(carol)
    code = client.post("/login", json={"username": "carol", "password": PASSWORD}).get_json()["code"]

    _register(app.test_client())
    assert app.test_client().post("/login", json={"username": "alice", "password": PASSWORD}).status_code == 200

    r = client.post("/login/mfa", json={"code": code})
    assert r.status_code == 200


# ---------------- malformed fields ----------------
def test_register_rejects_non_string_fields(client):
    assert _register(client, username=["alice"]).get_json()["error"] == "invalid_username"
    assert _register(client, password=12345678).get_json()["error"] == "weak_password"
    assert _register(client, full_name={"first": "A"}).get_json()["error"] == "invalid_field"
    assert _register(client, gender=["F"]).get_json()["error"] == "invalid_gender"
    assert _register(client, age=[30]).get_json()["error"] == "invalid_age"


def test_login_rejects_non_string_fields(client):
    _register(client)
    for body in ({"username": ["alice"], "password": PASSWORD},
                 {"username": "alice", "password": 12345678},
                 {"username": {"$ne": ""}, "password": None}):
        r = client.post("/login", json=body)
        assert r.status_code == 401
        assert r.get_json()["error"] == "bad_credentials"
