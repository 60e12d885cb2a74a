from __future__ import annotations

from companion_io.models.entities import EntityKind, Venue

from .base import ExportColumn, SchemaAdapter, flag_of, value_of

__all__ = [
    "VENUES",
]

VENUES = SchemaAdapter(
    kind=EntityKind.VENUES,
    entity_type=Venue,
    columns=(
        ExportColumn("Name", value_of("name")),
        ExportColumn("Type", value_of("venue_type")),
        ExportColumn("City", value_of("city")),
        ExportColumn("Address", value_of("address")),
        ExportColumn("Directions", value_of("directions")),
        ExportColumn("Access Method", value_of("access_method")),
        ExportColumn("Access Notes", value_of("access_notes")),
        ExportColumn("Booking App", value_of("booking_app")),
        ExportColumn("Booking Notes", value_of("booking_notes")),
        ExportColumn("Contact Name", value_of("contact_name")),
        ExportColumn("Contact Phone", value_of("contact_phone")),
        ExportColumn("Contact Email", value_of("contact_email")),
        ExportColumn("Cost Per Hour", value_of("cost_per_hour")),
        ExportColumn("Cost Per Day", value_of("cost_per_day")),
        ExportColumn("Cost Notes", value_of("cost_notes")),
        ExportColumn("Hotel Friendly", flag_of("hotel_friendly", blank_when_false=True)),
        ExportColumn("Favorite", flag_of("is_favorite", blank_when_false=True)),
        ExportColumn("Archived", flag_of("is_archived", blank_when_false=True)),
        ExportColumn("Notes", value_of("notes")),
    ),
    export_only_reason="Venue records are export-only. Use the Incall Book to add and manage venues.",
)
