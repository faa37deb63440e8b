"""Persistence for the countdown: append-only history plus a settings table.

Writes are best-effort. A failed write rolls back the session and is
logged; callers keep their in-memory state either way.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import union_all, select

from countdown import db
from countdown.models import SubscriptionEvent, SubBomb, CheerEvent, GraphSample, Setting


SETTING_STARTED_AT = 'started_at'
SETTING_BASE_TIME = 'base_time'


class TimerStore:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def _commit(self, what: str) -> bool:
        try:
            db.session.commit()
            return True
        except Exception:
            db.session.rollback()
            self.logger.exception(f"[store-error] failed to write {what}")
            return False

    # ---- settings ----

    def load_settings(self) -> Dict[str, int]:
        try:
            return {s.key: s.value for s in Setting.query.all()}
        except Exception:
            db.session.rollback()
            self.logger.exception("[store-error] failed to read settings")
            return {}

    def save_setting(self, key: str, value: int) -> bool:
        try:
            db.session.merge(Setting(key=key, value=value))
        except Exception:
            db.session.rollback()
            self.logger.exception(f"[store-error] failed to stage setting {key}")
            return False
        return self._commit(f"setting {key}={value}")

    # ---- history ----

    def latest_ending_at(self) -> Optional[int]:
        """Return ending_at of the newest row across subs, cheers and graph."""
        rows = union_all(
            select(SubscriptionEvent.timestamp, SubscriptionEvent.ending_at),
            select(CheerEvent.timestamp, CheerEvent.ending_at),
            select(GraphSample.timestamp, GraphSample.ending_at),
        ).subquery()
        try:
            newest = db.session.execute(
                select(rows.c.ending_at).order_by(rows.c.timestamp.desc()).limit(1)
            ).first()
        except Exception:
            db.session.rollback()
            self.logger.exception("[store-error] failed to read last ending_at")
            return None
        return newest[0] if newest else None

    def record_subscription(self, timestamp: int, ending_at: int, seconds: float,
                            plan: Optional[str], user_name: Optional[str]) -> bool:
        db.session.add(SubscriptionEvent(
            timestamp=timestamp,
            ending_at=ending_at,
            seconds_per_sub=seconds,
            plan=plan or 'undefined',
            user_name=user_name,
        ))
        return self._commit('subscription')

    def record_cheer(self, timestamp: int, ending_at: int, bits: int, user_name: Optional[str]) -> bool:
        db.session.add(CheerEvent(
            timestamp=timestamp,
            ending_at=ending_at,
            amount_bits=bits,
            user_name=user_name or 'ananonymouscheerer',
        ))
        return self._commit('cheer')

    def record_sub_bomb(self, timestamp: int, amount_subs: int, plan: Optional[str],
                        user_name: Optional[str]) -> bool:
        db.session.add(SubBomb(
            timestamp=timestamp,
            amount_subs=amount_subs,
            plan=plan or 'undefined',
            user_name=user_name,
        ))
        return self._commit('sub bomb')

    def add_graph_sample(self, timestamp: int, ending_at: int, keep: int = 120) -> bool:
        db.session.add(GraphSample(timestamp=timestamp, ending_at=ending_at))
        if not self._commit('graph sample'):
            return False
        # Keep only the latest `keep` samples
        try:
            stale = [
                row.id for row in
                GraphSample.query.order_by(GraphSample.timestamp.desc(), GraphSample.id.desc()).offset(keep).all()
            ]
            if stale:
                GraphSample.query.filter(GraphSample.id.in_(stale)).delete(synchronize_session=False)
        except Exception:
            db.session.rollback()
            self.logger.exception("[store-error] failed to prune graph")
            return False
        return self._commit('graph prune') if stale else True

    def graph_samples(self, limit: int = 120) -> List[GraphSample]:
        try:
            newest = (
                GraphSample.query
                .order_by(GraphSample.timestamp.desc(), GraphSample.id.desc())
                .limit(limit)
                .all()
            )
        except Exception:
            db.session.rollback()
            self.logger.exception("[store-error] failed to read graph samples")
            return []
        return list(reversed(newest))

    def recent_contributions(self, limit: int = 50) -> List[dict]:
        try:
            subs = SubscriptionEvent.query.order_by(SubscriptionEvent.timestamp.desc()).limit(limit).all()
            cheers = CheerEvent.query.order_by(CheerEvent.timestamp.desc()).limit(limit).all()
        except Exception:
            db.session.rollback()
            self.logger.exception("[store-error] failed to read contribution history")
            return []
        merged = [row.to_dict() for row in subs] + [row.to_dict() for row in cheers]
        merged.sort(key=lambda r: r['timestamp'], reverse=True)
        return merged[:limit]

    def clear(self) -> None:
        db.drop_all()
        db.create_all()
