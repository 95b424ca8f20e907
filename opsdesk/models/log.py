from __future__ import annotations
from .. import db
from . import now_local_naive
from sqlalchemy import Index, select, func, text


class DataSyncLog(db.Model):
	"""Append-only audit row written once per sync run.

	- sync_type: which extraction ran (item_master, purchase_orders, inventory_levels)
	- status: 'success' or 'failed'
	- records_processed / records_failed: zero on failed runs, nothing is partially committed
	- start_time, end_time stored as naive plant-local time
	- error_message: driver or pipeline message for failed runs
	"""

	__tablename__ = "data_sync_log"
	__table_args__ = (
		Index("IX_DataSyncLog_Time", "start_time"),
		Index("IX_DataSyncLog_Type_Status", "sync_type", "status"),
	)

	id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True, autoincrement=True)
	sync_type = db.Column(db.String(40), nullable=False)
	status = db.Column(db.String(16), nullable=False, server_default=text("'failed'"))
	records_processed = db.Column(db.Integer, nullable=False, default=0)
	records_failed = db.Column(db.Integer, nullable=False, default=0)
	start_time = db.Column(db.DateTime(timezone=False), nullable=False, default=now_local_naive)
	end_time = db.Column(db.DateTime(timezone=False), nullable=True)
	error_message = db.Column(db.Unicode(4000), nullable=True)

	@property
	def duration_ms(self) -> int | None:
		if self.end_time is None or self.start_time is None:
			return None
		delta = self.end_time - self.start_time
		return int(delta.total_seconds() * 1000)

	def __repr__(self):  # pragma: no cover - debug aid
		return (
			f"<DataSyncLog id={self.id} type={self.sync_type!r}"
			f" status={self.status} processed={self.records_processed}>"
		)

	@classmethod
	def record(
		cls,
		session,
		*,
		sync_type: str,
		status: str,
		start_time,
		end_time=None,
		records_processed: int = 0,
		records_failed: int = 0,
		error_message: str | None = None,
	) -> "DataSyncLog":
		"""Insert and commit a single audit row."""
		entry = cls(
			sync_type=sync_type,
			status=status,
			records_processed=records_processed,
			records_failed=records_failed,
			start_time=start_time,
			end_time=end_time or now_local_naive(),
			error_message=error_message[:4000] if error_message else None,
		)
		session.add(entry)
		session.commit()
		return entry

	@classmethod
	def get_latest_success_timestamp(cls, session, sync_type: str | None = None):
		"""Latest end_time of a successful run, optionally for one sync type; None if never."""
		stmt = (
			select(func.max(cls.end_time))
			.where(cls.status == "success")
			.where(cls.end_time.isnot(None))
		)
		if sync_type:
			stmt = stmt.where(cls.sync_type == sync_type)
		return session.execute(stmt).scalar()
