"""Plain records and pure collection transitions, free of storage and HTTP."""
