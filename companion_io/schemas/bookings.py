from __future__ import annotations

from companion_io.models.entities import Booking, EntityKind

from .base import ExportColumn, SchemaAdapter, datetime_of, flag_of, value_of

__all__ = [
    "BOOKING_STATUSES",
    "LOCATION_TYPES",
    "BOOKINGS",
]

BOOKING_STATUSES = (
    "To Be Confirmed",
    "Screening",
    "Pending Deposit",
    "Confirmed",
    "In Progress",
    "Completed",
    "Cancelled",
    "No Show",
)
LOCATION_TYPES = ("Incall", "Outcall", "Travel", "Virtual")

BOOKINGS = SchemaAdapter(
    kind=EntityKind.BOOKINGS,
    entity_type=Booking,
    dependencies=(EntityKind.CLIENTS,),
    columns=(
        ExportColumn("Client", lambda b, joins: joins.client_alias(b.client_id)),
        ExportColumn("Date/Time", datetime_of("date_time")),
        ExportColumn("Duration (min)", value_of("duration")),
        ExportColumn("Status", value_of("status")),
        ExportColumn("Location Type", value_of("location_type")),
        ExportColumn("Location Address", value_of("location_address")),
        ExportColumn("Base Rate", value_of("base_rate")),
        ExportColumn("Extras", value_of("extras")),
        ExportColumn("Travel Fee", value_of("travel_fee")),
        ExportColumn("Total", lambda b, joins: b.total),
        ExportColumn("Deposit Amount", value_of("deposit_amount")),
        ExportColumn("Deposit Received", flag_of("deposit_received")),
        ExportColumn("Deposit Method", value_of("deposit_method")),
        ExportColumn("Payment Method", value_of("payment_method")),
        ExportColumn("Payment Received", flag_of("payment_received")),
        ExportColumn("Notes", value_of("notes")),
        ExportColumn("Created At", datetime_of("created_at")),
        ExportColumn("Confirmed At", datetime_of("confirmed_at")),
        ExportColumn("Completed At", datetime_of("completed_at")),
        ExportColumn("Cancelled At", datetime_of("cancelled_at")),
        ExportColumn("Cancellation Reason", value_of("cancellation_reason")),
        ExportColumn("Cancelled By", value_of("cancelled_by")),
        ExportColumn("Deposit Outcome", value_of("deposit_outcome")),
    ),
    export_only_reason=(
        "Booking import is not available: bookings have complex relationships with clients. "
        "Import clients and finances separately."
    ),
)
