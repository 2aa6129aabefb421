"""Pure domain core: clock, catalog snapshots, workflow rules, DTOs, validation."""
