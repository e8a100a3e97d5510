"""
Engine Bootstrap

설정 로드, 의존성 주입, 명령 실행.

명령:
- replay: 기록된 세션(JSONL)을 가상 시계로 재생하여 Ledger에 기록
- purge: 보관 기간이 지난 Transaction 1회 정리
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.replay import ReplayHost, ReplayStep, load_catalog, load_session
from core.config.loader import (
    EngineConfig,
    load_engine_config,
    validate_character_key,
)
from core.constants import Paths
from core.ledger import LedgerStore, LedgerSummary, Transaction, summary_line
from core.logging import setup_logging
from core.storage.config_store import ConfigStore, init_default_configs
from core.utils.timezone import now_utc
from engine.engine import LedgerEngine
from engine.scheduler import ManualScheduler

logger = logging.getLogger("engine")

APP_TITLE = "Gold Ledger Engine"


def resolve_config(
    settings_path: Path | None = None,
    character: str | None = None,
) -> EngineConfig:
    """설정 파일 + 명령줄 인자로 EngineConfig 결정

    --character가 있으면 설정 파일 없이도 기본값으로 실행.

    Raises:
        ConfigLoadError: 설정 파일이 없고 --character도 없는 경우, 잘못된 캐릭터 키
    """
    path = settings_path or Paths.SETTINGS_FILE
    if character is not None and not path.exists():
        logger.info(f"설정 파일 없음: 기본 설정으로 실행 ({path})")
        return EngineConfig(character_key=validate_character_key(character))

    config = load_engine_config(path)
    if character is not None:
        config = replace(config, character_key=validate_character_key(character))
    return config


async def replay_session(
    steps: list[ReplayStep],
    config: EngineConfig,
    ledger_store: LedgerStore,
    catalog: dict | None = None,
) -> LedgerSummary:
    """세션 재생

    각 단계의 시각까지 가상 시계를 진행하고, 상태 블록을 호스트에 반영한 뒤
    이벤트를 전달. 마지막 이벤트 후 만료 시간만큼 더 진행하여 남은 타이머 정리.

    Args:
        steps: load_session() 결과
        config: 엔진 설정
        ledger_store: 기록 대상
        catalog: 아이템 메타데이터

    Returns:
        이번 재생에서 기록된 Transaction 요약
    """
    host = ReplayHost(catalog=catalog)
    scheduler = ManualScheduler()
    summary = LedgerSummary()

    def collect(transaction: Transaction) -> None:
        summary.add(transaction)

    ledger_store.subscribe(collect)
    engine = LedgerEngine(
        host,
        ledger_store,
        config.character_key,
        scheduler=scheduler,
        arbiter_config=config.arbiter,
        tracking=config.tracking,
    )

    if steps:
        host.apply(steps[0].state)
    engine.start()

    try:
        for step in steps:
            await scheduler.advance_to(step.t)
            host.apply(step.state)
            await engine.dispatch(step.event)

        await scheduler.advance(config.arbiter.stale_after_sec)
    finally:
        await engine.stop()
        ledger_store.unsubscribe(collect)

    logger.info(
        f"세션 재생 완료: {len(steps)}개 이벤트",
        extra=engine.get_stats(),
    )
    return summary


async def run_replay(args: argparse.Namespace, config: EngineConfig) -> int:
    steps = load_session(Path(args.session))
    catalog = load_catalog(Path(args.catalog)) if args.catalog else None
    db_path = Path(args.db) if args.db else config.db_path

    logger.info(f"Session: {args.session} ({len(steps)} events)")
    logger.info(f"DB: {db_path}")

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        await init_default_configs(db)

        config_store = ConfigStore(db)
        await config_store.update_engine_status(
            is_running=True,
            character_key=config.character_key,
            started_at=now_utc().isoformat(),
        )

        summary = await replay_session(steps, config, LedgerStore(db), catalog)

        await config_store.update_engine_status(
            is_running=False,
            character_key=config.character_key,
            events_processed=len(steps),
        )

    print(summary_line(summary))
    return 0


async def run_purge(args: argparse.Namespace, config: EngineConfig) -> int:
    db_path = Path(args.db) if args.db else config.db_path

    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        await init_default_configs(db)

        config_store = ConfigStore(db)
        max_age_days = await config_store.get_max_age_days()
        purged = await LedgerStore(db).purge_older_than(max_age_days)
        await config_store.mark_purged()

    logger.info(f"정리 완료: {purged}건 삭제 (보관 {max_age_days}일)")
    print(f"Purged {purged} entries older than {max_age_days} days")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m engine", description=APP_TITLE)
    parser.add_argument("--settings", help="설정 파일 경로 (기본: config/settings.yaml)")
    parser.add_argument("--character", help="캐릭터 키 (예: Alice-Realm)")
    parser.add_argument("--db", help="Ledger DB 경로")
    parser.add_argument("--log-level", default="INFO", help="콘솔 로그 레벨")
    parser.add_argument("--no-log-file", action="store_true", help="파일 로그 끄기")

    commands = parser.add_subparsers(dest="command", required=True)

    replay = commands.add_parser("replay", help="기록된 세션 재생")
    replay.add_argument("session", help="세션 파일 (JSONL)")
    replay.add_argument("--catalog", help="아이템 카탈로그 (YAML)")

    commands.add_parser("purge", help="보관 기간이 지난 거래 정리")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Engine 메인 함수"""
    args = build_parser().parse_args(argv)
    setup_logging(
        "engine",
        console_level=args.log_level,
        log_to_file=not args.no_log_file,
    )

    logger.info("=" * 60)
    logger.info(f"{APP_TITLE} 시작: {args.command}")
    logger.info("=" * 60)

    # 1. 설정 로드
    try:
        config = resolve_config(
            Path(args.settings) if args.settings else None,
            args.character,
        )
    except Exception as e:
        logger.error(f"설정 로드 실패: {e}")
        sys.exit(1)

    logger.info(f"Character: {config.character_key}")

    # 2. 명령 실행
    try:
        if args.command == "replay":
            code = await run_replay(args, config)
        else:
            code = await run_purge(args, config)
    except asyncio.CancelledError:
        logger.info("실행 취소됨")
        code = 1
    except KeyboardInterrupt:
        logger.info("Ctrl+C 감지")
        code = 1

    logger.info("=" * 60)
    logger.info(f"{APP_TITLE} 종료")
    logger.info("=" * 60)
    return code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
