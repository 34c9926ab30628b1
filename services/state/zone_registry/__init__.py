"""Zone Registry Service: zone definitions, ownership, and premiums."""
