import logging
import time
from typing import Optional

from sqlalchemy.orm import Session

from errors import NotFound, Updated, UpdateResult, VersionConflict
from identifiers import generate_ulid
from models import SettlementList
from schemas import AppState, ListResponse

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def to_response(row: SettlementList) -> ListResponse:
    return ListResponse(
        id=row.id,
        data=AppState.model_validate(row.data),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def create_list(db: Session, data: AppState, list_id: Optional[str] = None) -> SettlementList:
    now = now_ms()
    row = SettlementList(
        id=list_id or generate_ulid(now),
        data=data.to_json_dict(),
        version=1,
        created_at=now,
        updated_at=now,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Created settlement list %s", row.id)
    return row


def get_list(db: Session, list_id: str) -> Optional[SettlementList]:
    return db.query(SettlementList).filter(SettlementList.id == list_id).first()


def update_list(db: Session, list_id: str, data: AppState, expected_version: int) -> UpdateResult:
    new_version = expected_version + 1
    # Only matches while the caller's version is still current
    changed = (
        db.query(SettlementList)
        .filter(SettlementList.id == list_id, SettlementList.version == expected_version)
        .update(
            {"data": data.to_json_dict(), "version": new_version, "updated_at": now_ms()},
            synchronize_session=False,
        )
    )
    db.commit()

    if changed == 0:
        current = db.query(SettlementList.version).filter(SettlementList.id == list_id).first()
        if current is None:
            return NotFound(list_id)
        logger.warning(
            "Version conflict on %s: expected %s, actual %s", list_id, expected_version, current.version
        )
        return VersionConflict(expected_version, current.version)

    row = get_list(db, list_id)
    logger.info("Updated settlement list %s to version %s", list_id, new_version)
    return Updated(row)


def delete_list(db: Session, list_id: str) -> bool:
    deleted = db.query(SettlementList).filter(SettlementList.id == list_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0
