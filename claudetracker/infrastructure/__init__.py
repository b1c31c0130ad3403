"""Process plumbing: locking, scheduling, wiring."""
