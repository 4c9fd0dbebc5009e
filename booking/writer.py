"""
Booking persistence: one row per slot, written in a single batch.
"""
import logging
import uuid
from datetime import datetime

from models import Booking, BookingStatus
from models.booking import BookingType
from booking.errors import Conflict, PersistenceError
from booking.slots import fmt_schedule

logger = logging.getLogger(__name__)


def _booking_type(slot_count: int) -> str:
    return BookingType.SINGLE if slot_count == 1 else BookingType.MULTI


def build_rows(user_id: str, capster_id: int, branch_id: int, service_ids: list,
               slots: list, total_price: int, total_duration: int, group: str = None) -> list:
    group = group or str(uuid.uuid4())
    booking_type = _booking_type(len(slots))
    return [
        {
            "user_id": user_id,
            "capster_id": capster_id,
            "branch_id": branch_id,
            "service_ids": list(service_ids),
            "schedule": slot,
            "status": BookingStatus.CONFIRMED,
            "total_price": total_price,
            "total_duration": total_duration,
            "booking_group": group,
            "booking_type": booking_type,
            "slot_sequence": seq,
        }
        for seq, slot in enumerate(slots, start=1)
    ]


def write_booking(store, user_id: str, capster_id: int, branch_id: int, service_ids: list,
                  slots: list, total_price: int, total_duration: int) -> list:
    """
    Persist a conflict-checked booking. Returns the inserted rows ordered
    by slot_sequence. No retry: on failure the caller resubmits.
    """
    rows = build_rows(user_id, capster_id, branch_id, service_ids, slots, total_price, total_duration)
    try:
        if len(rows) == 1:
            inserted = store.insert_one(Booking, rows[0])
            inserted = [inserted] if inserted is not None else []
        else:
            inserted = store.insert_many(Booking, rows)
    except Conflict:
        # Lost the race between the availability check and this insert
        raise Conflict(
            f"Capster already booked on {fmt_schedule(slots[0])}",
            details={"capster_id": capster_id, "schedule": slots[0].isoformat()},
        )

    if not inserted:
        raise PersistenceError("No data returned after insert")

    logger.info(
        "Booking group %s created: user=%s capster=%s slots=%d",
        rows[0]["booking_group"], user_id, capster_id, len(inserted),
    )
    return inserted


def reschedule_group(store, group_rows: list, capster_id: int, branch_id: int, service_ids: list,
                     slots: list, total_price: int, total_duration: int) -> list:
    """
    Rewrite an existing booking group onto a new slot sequence.

    Rows are matched by slot_sequence. Surplus rows are soft-cancelled.
    Missing rows revive a cancelled row of the group holding the same
    sequence, or are inserted. Everything commits together.
    """
    group = group_rows[0].booking_group
    user_id = group_rows[0].user_id
    booking_type = _booking_type(len(slots))
    now = datetime.utcnow()

    kept = sorted(group_rows, key=lambda r: r.slot_sequence)[:len(slots)]
    surplus = [r for r in group_rows if r not in kept]

    try:
        for row in surplus:
            store.update(
                Booking, Booking.id == row.id,
                patch={"status": BookingStatus.CANCELLED, "cancelled_at": now},
                commit=False,
            )

        # Each row is flushed on its own. When the group moves later the
        # last row goes first, so no row lands on a sibling's old slot.
        pairs = list(zip(kept, slots))
        if pairs and slots[0] > kept[0].schedule:
            pairs.reverse()
        for seq_row, slot in pairs:
            store.update(
                Booking, Booking.id == seq_row.id,
                patch={
                    "capster_id": capster_id,
                    "branch_id": branch_id,
                    "service_ids": list(service_ids),
                    "schedule": slot,
                    "total_price": total_price,
                    "total_duration": total_duration,
                    "booking_type": booking_type,
                },
                commit=False,
            )

        extra = build_rows(user_id, capster_id, branch_id, service_ids, slots,
                           total_price, total_duration, group=group)[len(kept):]
        if extra:
            # (booking_group, slot_sequence) stays unique: a sequence an
            # earlier shrink cancelled is revived rather than inserted again
            dormant = {
                r.slot_sequence: r
                for r in store.find_many(
                    Booking,
                    Booking.booking_group == group,
                    Booking.status == BookingStatus.CANCELLED,
                )
            }
            fresh = []
            for values in extra:
                row = dormant.get(values["slot_sequence"])
                if row is None:
                    fresh.append(values)
                    continue
                store.update(Booking, Booking.id == row.id, patch={**values, "cancelled_at": None}, commit=False)
            if fresh:
                store.insert_many(Booking, fresh, commit=False)

        store.commit()
    except Conflict:
        store.rollback()
        raise Conflict(
            f"New schedule conflicts with an existing booking on {fmt_schedule(slots[0])}",
            details={"capster_id": capster_id, "schedule": slots[0].isoformat()},
        )

    logger.info("Booking group %s rescheduled onto %d slot(s)", group, len(slots))
    return store.find_many(
        Booking,
        Booking.booking_group == group,
        Booking.status == BookingStatus.CONFIRMED,
        order_by=Booking.slot_sequence.asc(),
    )


def cancel_group(store, group: str, user_id: str) -> list:
    rows = store.update(
        Booking,
        Booking.booking_group == group,
        Booking.user_id == user_id,
        Booking.status != BookingStatus.CANCELLED,
        patch={"status": BookingStatus.CANCELLED, "cancelled_at": datetime.utcnow()},
    )
    if not rows:
        raise PersistenceError("No data returned after cancel")
    logger.info("Booking group %s cancelled (%d slot(s))", group, len(rows))
    return rows
