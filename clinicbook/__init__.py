"""Provider schedules, time slots and appointment booking."""
