#!/usr/bin/env python3
"""
금고 잔액 정합 점검 / 복구 스크립트

모든 금고(또는 지정한 금고)의 캐시 잔액을 입출금 합계와 비교하고,
불일치가 있으면 재계산하여 덮어씀.

실행 방법:
    python scripts/recompute_balances.py --mode sandbox --dry-run
    python scripts/recompute_balances.py --mode production --vault-id <ID>
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.logging import setup_logging
from core.types import AppMode
from core.vault.errors import NotFoundError
from core.vault.ledger import VaultLedger
from core.vault.store import VaultStore

logger = logging.getLogger(__name__)


async def run(
    db_path: Path,
    vault_id: str | None = None,
    dry_run: bool = False,
) -> int:
    """정합 점검 실행

    존재하지 않는 금고는 로그를 남기고 실패로 집계.

    Returns:
        불일치 금고 수 + 실패 금고 수
    """
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)

        store = VaultStore(db)
        ledger = VaultLedger(store)

        if vault_id:
            vault_ids = [vault_id]
        else:
            vault_ids = [v.vault_id for v in await store.list_all_vaults()]

        drift_count = 0
        failed_count = 0

        for vid in vault_ids:
            try:
                if dry_run:
                    drift = await ledger.check_drift(vid)
                else:
                    drift = await ledger.recompute_balance(vid)
            except NotFoundError:
                logger.error(f"금고 없음: {vid}")
                failed_count += 1
                continue

            if drift is None:
                logger.info(f"OK: {vid}")
                continue

            drift_count += 1
            action = "불일치" if dry_run else "복구"
            logger.warning(
                f"{action}: {vid} cached={drift.cached} expected={drift.expected} "
                f"(diff={drift.difference})"
            )

        logger.info(
            f"점검 완료: {len(vault_ids)}개 금고, 불일치 {drift_count}개, 실패 {failed_count}개"
        )
        return drift_count + failed_count


def main() -> None:
    parser = argparse.ArgumentParser(
        description="금고 잔액 정합 점검 / 복구"
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in AppMode],
        default=AppMode.SANDBOX.value,
        help="실행 모드 (기본: sandbox)",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="DB 파일 경로 (지정 시 --mode 무시)",
    )
    parser.add_argument(
        "--vault-id",
        default=None,
        help="점검할 금고 ID (기본: 전체)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="점검만 하고 복구하지 않음",
    )
    args = parser.parse_args()

    setup_logging("scripts")

    db_path = args.db_path or get_db_path(args.mode)
    problem_count = asyncio.run(run(db_path, args.vault_id, args.dry_run))

    # dry-run에서 불일치나 실패가 있으면 종료 코드 1 (cron 모니터링용)
    if args.dry_run and problem_count:
        sys.exit(1)


if __name__ == "__main__":
    main()
