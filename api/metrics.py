from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# Engine commands by type and outcome ("ok" or the failure kind)
COMMANDS_TOTAL = Counter(
    "fieldgate_commands_total",
    "Total engine commands dispatched",
    ["command", "outcome"],
)

COMMAND_LATENCY_SECONDS = Histogram(
    "fieldgate_command_latency_seconds",
    "Latency of engine command dispatch in seconds",
    ["command"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

# accepted | constrained | rejected
PLACEMENT_OUTCOMES = Counter(
    "fieldgate_placement_outcomes_total",
    "Pin placement outcomes against mission geofences",
    ["status"],
)

LEDGER_ENTRIES = Gauge(
    "fieldgate_ledger_entries",
    "Entries currently held in the ledger",
)

EXPORTS_ARCHIVED = Counter(
    "fieldgate_exports_archived_total",
    "Export snapshots written to the archive",
)

# Archive write failures (we never want these, but they will happen)
EXPORT_ARCHIVE_ERRORS = Counter(
    "fieldgate_export_archive_errors_total",
    "Count of failed export archive writes to the database",
)
