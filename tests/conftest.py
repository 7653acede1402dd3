from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from app import config
from app.auth import AdminPrincipal, get_current_admin
from app.database import Database, get_db
from app.main import app
from app.models import Admin, Product, ProductVariant, Store


@pytest.fixture()
def database():
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture()
def session(database):
    """Open a short-lived session. All test sessions share one SQLite connection,
    so each must be closed before the next request runs."""

    @contextmanager
    def _session():
        db = database.session()
        try:
            yield db
        finally:
            db.close()

    return _session


@pytest.fixture()
def seed(session):
    with session() as db:
        store = Store(name="Doce Lar", slug="doce-lar", whatsapp="5511988887777")
        other = Store(name="Outra Loja", slug="outra-loja")
        closed = Store(name="Fechada", slug="fechada", is_active=False)
        db.add_all([store, other, closed])
        db.flush()

        admin = Admin(email="dona@docelar.com", store_id=store.id)
        other_admin = Admin(email="admin@outraloja.com", store_id=other.id)

        brigadeiro = Product(store_id=store.id, name="Brigadeiro", price=Decimal("2.50"), min_quantity=10)
        bolo = Product(store_id=store.id, name="Bolo de Pote", price=None)
        torta = Product(store_id=store.id, name="Torta", price=Decimal("50.00"), is_active=False)
        coxinha = Product(store_id=store.id, name="Coxinha", price=None)
        pao_de_mel = Product(store_id=other.id, name="Pão de Mel", price=Decimal("5.00"))
        db.add_all([admin, other_admin, brigadeiro, bolo, torta, coxinha, pao_de_mel])
        db.flush()

        chocolate = ProductVariant(
            product_id=bolo.id, store_id=store.id, label="Chocolate", price=Decimal("12.00"), sort_order=0
        )
        ninho = ProductVariant(
            product_id=bolo.id, store_id=store.id, label="Ninho", price=Decimal("14.00"), sort_order=1
        )
        limao = ProductVariant(
            product_id=bolo.id,
            store_id=store.id,
            label="Limão",
            price=Decimal("11.00"),
            is_active=False,
            sort_order=2,
        )
        db.add_all([chocolate, ninho, limao])
        db.commit()

        return SimpleNamespace(
            store_id=store.id,
            other_store_id=other.id,
            closed_store_id=closed.id,
            admin_id=admin.id,
            other_admin_id=other_admin.id,
            brigadeiro_id=brigadeiro.id,
            bolo_id=bolo.id,
            torta_id=torta.id,
            coxinha_id=coxinha.id,
            pao_de_mel_id=pao_de_mel.id,
            chocolate_id=chocolate.id,
            ninho_id=ninho.id,
            limao_id=limao.id,
        )


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", False)


@pytest.fixture()
def login_as(seed):
    def _login(admin_id=None, store_id=None):
        principal = AdminPrincipal(
            admin_id=admin_id or seed.admin_id, store_id=store_id or seed.store_id
        )
        app.dependency_overrides[get_current_admin] = lambda: principal
        return principal

    return _login


@pytest.fixture()
def client(database, seed, login_as):
    def override_get_db():
        db = database.session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    login_as()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def future_date(days: int = 3) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).date().isoformat()


@pytest.fixture()
def order_payload(seed):
    def _payload(**overrides):
        payload = {
            "customer": {"name": "Maria Silva", "whatsapp": "(11) 98765-4321"},
            "items": [{"productId": seed.brigadeiro_id, "quantity": 20}],
            "fulfillmentType": "PICKUP",
            "deliveryDate": future_date(),
        }
        payload.update(overrides)
        return payload

    return _payload
