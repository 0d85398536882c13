from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from modvfs.models.mod import ModRow

MODS = "/api/v1/mods/"


def _register(client, mod_id: str, paths: list[str], **extra):
    r = client.post(MODS, json={"id": mod_id, "name": f"Mod {mod_id}", "manifest": paths, **extra})
    assert r.status_code == 201, r.text
    return r.json()


class TestRegisterMod:
    def test_register(self, client):
        data = _register(client, "A", ["Data\\A.esp", "x"], category="DLC")
        assert data["priority"] == 0
        assert data["manifest"] == ["data/a.esp", "x"]
        assert data["category"] == "DLC"

    def test_duplicate_id(self, client):
        _register(client, "A", ["x"])
        r = client.post(MODS, json={"id": "A", "name": "again", "manifest": ["y"]})
        assert r.status_code == 409

    def test_empty_manifest(self, client):
        r = client.post(MODS, json={"id": "A", "name": "empty", "manifest": []})
        assert r.status_code == 400

    def test_invalid_category(self, client):
        r = client.post(MODS, json={"id": "A", "name": "A", "manifest": ["x"], "category": "Sound"})
        assert r.status_code == 422

    def test_persisted(self, client, engine):
        _register(client, "A", ["x"])
        with Session(engine) as s:
            rows = s.exec(select(ModRow)).all()
        assert [r.id for r in rows] == ["A"]


class TestListMods:
    def test_empty(self, client):
        r = client.get(MODS)
        assert r.status_code == 200
        assert r.json()["mods"] == []
        assert r.json()["total_count"] == 0

    def test_overwrite_relationships(self, client):
        _register(client, "A", ["x"])
        _register(client, "B", ["x"])
        data = client.get(MODS).json()
        entries = {e["mod"]["id"]: e for e in data["mods"]}
        assert entries["A"]["overwritten_by"] == ["B"]
        assert entries["A"]["flag"] == "loser"
        assert entries["B"]["overwrites"] == ["A"]
        assert entries["B"]["flag"] == "winner"

    def test_filter(self, client):
        _register(client, "A", ["x"])
        _register(client, "B", ["y"])
        data = client.get(MODS, params={"filter": "mod b"}).json()
        assert [e["mod"]["id"] for e in data["mods"]] == ["B"]
        assert data["total_count"] == 2


class TestGetMod:
    def test_found(self, client):
        _register(client, "A", ["x"])
        _register(client, "B", ["x"])
        r = client.get(f"{MODS}A")
        assert r.status_code == 200
        assert r.json()["overwritten_by"] == ["B"]

    def test_not_found(self, client):
        assert client.get(f"{MODS}nope").status_code == 404


class TestUpdateMod:
    def test_disable(self, client):
        _register(client, "A", ["x"])
        _register(client, "B", ["x"])
        r = client.patch(f"{MODS}B", json={"enabled": False})
        assert r.status_code == 200
        assert r.json()["enabled"] is False
        assert client.get("/api/v1/vfs/resolve", params={"path": "x"}).json()["mod_id"] == "A"

    def test_move(self, client):
        for mod_id in "ABC":
            _register(client, mod_id, [mod_id.lower()])
        r = client.patch(f"{MODS}C", json={"priority": 0})
        assert r.json()["priority"] == 0
        assert client.get("/api/v1/load-order/").json()["order"] == ["C", "A", "B"]

    def test_bad_priority_changes_nothing(self, client):
        _register(client, "A", ["x"])
        r = client.patch(f"{MODS}A", json={"priority": 5, "enabled": False})
        assert r.status_code == 400
        assert client.get(f"{MODS}A").json()["mod"]["enabled"] is True

    def test_empty_update(self, client):
        _register(client, "A", ["x"])
        assert client.patch(f"{MODS}A", json={}).status_code == 400

    def test_not_found(self, client):
        assert client.patch(f"{MODS}nope", json={"enabled": False}).status_code == 404


class TestRemoveMod:
    def test_remove_compacts(self, client, engine):
        for mod_id in "ABC":
            _register(client, mod_id, [mod_id.lower()])
        assert client.delete(f"{MODS}A").status_code == 204
        assert client.get("/api/v1/load-order/").json()["order"] == ["B", "C"]
        with Session(engine) as s:
            rows = s.exec(select(ModRow).order_by(ModRow.position)).all()
        assert [(r.id, r.position) for r in rows] == [("B", 0), ("C", 1)]

    def test_not_found(self, client):
        assert client.delete(f"{MODS}nope").status_code == 404


class TestModDetails:
    def test_files(self, client):
        _register(client, "A", ["x", "a"])
        _register(client, "B", ["x"])
        data = client.get(f"{MODS}A/files").json()
        assert {f["path"]: f["status"] for f in data["files"]} == {
            "a": "winning",
            "x": "overridden",
        }

    def test_conflicts(self, client):
        _register(client, "A", ["x"])
        _register(client, "B", ["x"])
        data = client.get(f"{MODS}B/conflicts").json()
        assert data["overwrites"] == ["A"]
        assert data["flag"] == "winner"

    def test_conflicts_not_found(self, client):
        assert client.get(f"{MODS}nope/conflicts").status_code == 404
        assert client.get(f"{MODS}nope/files").status_code == 404


class TestPersistFailure:
    def test_failed_write_discards_change(self, client, monkeypatch):
        _register(client, "A", ["x"])

        def _fail(session, registry):
            raise OperationalError("INSERT INTO mods", {}, Exception("disk I/O error"))

        monkeypatch.setattr("modvfs.routers.deps.save_registry", _fail)
        r = client.post(MODS, json={"id": "B", "name": "Mod B", "manifest": ["x"]})
        assert r.status_code == 500

        data = client.get(MODS).json()
        assert [e["mod"]["id"] for e in data["mods"]] == ["A"]
        assert client.get("/api/v1/vfs/resolve", params={"path": "x"}).json()["mod_id"] == "A"
