import os
import tempfile

# Keep the app's on-disk database out of the user's data directory.
os.environ.setdefault("MODVFS_DATA_DIR", tempfile.mkdtemp(prefix="modvfs-tests-"))

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

import modvfs.models  # noqa: E402, F401
from modvfs.database import get_session  # noqa: E402
from modvfs.main import app  # noqa: E402
from modvfs.schemas.mod import ModCategory, ModCreate  # noqa: E402
from modvfs.services.engine import ModEngine  # noqa: E402
from modvfs.services.registry import ModRegistry  # noqa: E402


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    with Session(engine) as sess:
        yield sess


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setattr("modvfs.database.engine", engine)

    def _override_session() -> Generator[Session, None, None]:
        with Session(engine) as sess:
            yield sess

    app.dependency_overrides[get_session] = _override_session
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
    app.dependency_overrides.clear()


@pytest.fixture
def make_mod():
    def _make(
        mod_id: str,
        paths: list[str] | None = None,
        *,
        name: str | None = None,
        version: str = "1.0",
        category: ModCategory = ModCategory.OTHER,
        enabled: bool = True,
        identity_key: str | None = None,
    ) -> ModCreate:
        return ModCreate(
            id=mod_id,
            name=name if name is not None else f"Mod {mod_id}",
            version=version,
            category=category,
            enabled=enabled,
            identity_key=identity_key,
            manifest=paths if paths is not None else [f"{mod_id.lower()}/only.esp"],
        )

    return _make


@pytest.fixture
def registry() -> ModRegistry:
    return ModRegistry()


@pytest.fixture
def abc_registry(registry, make_mod) -> ModRegistry:
    """A(0), B(1), C(2); A and B share "x", B and C share "y"."""
    registry.register(make_mod("A", ["x", "a.esp"]))
    registry.register(make_mod("B", ["x", "y"]))
    registry.register(make_mod("C", ["y", "c.esp"]))
    return registry


@pytest.fixture
def mod_engine(abc_registry) -> ModEngine:
    return ModEngine(abc_registry)
