"""
Web 조회 API 통합 테스트

임시 파일 DB에 거래를 기록한 뒤 읽기 전용 연결로 조회.
"""

from datetime import timedelta
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.ledger.store import LedgerStore
from core.ledger.types import Transaction, TransactionKind
from core.storage.config_store import init_default_configs
from core.utils.timezone import now_utc
from web.app import app
from web.dependencies import get_app_settings, get_db


@pytest_asyncio.fixture
async def db_path(temp_dir: Path) -> Path:
    """거래 3건(Alice) + 1건(Bob)이 기록된 DB"""
    path = temp_dir / "ledger.db"
    now = now_utc()

    async with SQLiteAdapter(path) as db:
        await init_schema(db)
        await init_default_configs(db)
        store = LedgerStore(db)
        for i, (kind, value, character, kwargs) in enumerate([
            (TransactionKind.SALE, 300, "Alice-Realm", {"item_id": 2589, "item_link": "[Linen Cloth]", "quantity": 1}),
            (TransactionKind.REPAIR, -100, "Alice-Realm", {"source": "Blacksmith"}),
            (TransactionKind.WARBANK_GOLD_IN, 500, "Alice-Realm", {}),
            (TransactionKind.QUEST_GOLD, 900, "Bob-Realm", {"source": "Quest #42"}),
        ]):
            await store.append(Transaction(
                kind=kind,
                character_key=character,
                value=value,
                timestamp=now - timedelta(minutes=10 - i),
                **kwargs,
            ))

    return path


@pytest_asyncio.fixture
async def client(
    db_path: Path, temp_settings_file: Path
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """의존성을 임시 DB/설정으로 교체한 클라이언트 (lifespan 미실행)"""

    async def override_db() -> AsyncGenerator[SQLiteAdapter, None]:
        async with SQLiteAdapter(db_path, readonly=True) as db:
            yield db

    settings = Settings(temp_settings_file)
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_app_settings] = lambda: settings

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class TestHealth:
    """GET /health"""

    @pytest.mark.asyncio
    async def test_health(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["character_key"] == "Alice-Realm"


class TestTransactions:
    """GET /api/ledger/transactions"""

    @pytest.mark.asyncio
    async def test_newest_first(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/ledger/transactions")

        body = response.json()
        assert body["total_count"] == 4
        assert [t["kind"] for t in body["transactions"]] == [
            "quest-gold", "warbank-gold-in", "repair", "sale",
        ]

    @pytest.mark.asyncio
    async def test_filter_character_and_kind(self, client: httpx.AsyncClient) -> None:
        response = await client.get(
            "/api/ledger/transactions",
            params={"character": "Alice-Realm", "kind": ["sale", "repair"]},
        )

        body = response.json()
        assert body["total_count"] == 2
        assert body["transactions"][0]["money"].startswith("-")

    @pytest.mark.asyncio
    async def test_preset_and_paging(self, client: httpx.AsyncClient) -> None:
        response = await client.get(
            "/api/ledger/transactions",
            params={"preset": "Vendor", "limit": 1},
        )

        body = response.json()
        assert body["limit"] == 1
        assert [t["item_id"] for t in body["transactions"]] == [2589]

    @pytest.mark.asyncio
    async def test_unknown_kind_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/ledger/transactions", params={"kind": "theft"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_period_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/ledger/transactions", params={"period": "Next Year"})

        assert response.status_code == 400


class TestSummaryAndExport:
    """요약 / 내보내기"""

    @pytest.mark.asyncio
    async def test_summary_excludes_transfers(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/ledger/summary", params={"character": "Alice-Realm"})

        body = response.json()
        assert body["total_income"] == 300
        assert body["total_expense"] == 100
        assert body["transfers_in"] == 500
        assert body["net"] == 200
        assert body["count"] == 3

    @pytest.mark.asyncio
    async def test_export_text(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/ledger/export")

        assert response.status_code == 200
        assert response.text.startswith("Gold Ledger Transaction Export")
        assert "Entries: 4" in response.text


class TestMetadata:
    """유형 / 캐릭터 / 설정 조회"""

    @pytest.mark.asyncio
    async def test_kinds(self, client: httpx.AsyncClient) -> None:
        body = (await client.get("/api/ledger/kinds")).json()

        kinds = {k["kind"]: k for k in body["kinds"]}
        assert kinds["warbank-gold-in"]["is_transfer"] is True
        assert body["type_presets"][0] == {"label": "All Types", "kinds": None}

    @pytest.mark.asyncio
    async def test_characters(self, client: httpx.AsyncClient) -> None:
        body = (await client.get("/api/ledger/characters")).json()

        assert sorted(body) == ["Alice-Realm", "Bob-Realm"]

    @pytest.mark.asyncio
    async def test_config(self, client: httpx.AsyncClient) -> None:
        body = (await client.get("/api/config")).json()

        assert [c["key"] for c in body] == ["engine_status", "ledger"]

    @pytest.mark.asyncio
    async def test_missing_config_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/config/risk")

        assert response.status_code == 404
