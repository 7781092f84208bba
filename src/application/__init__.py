"""Application layer - Use cases and orchestration.

Commands change state (sync, link, delete); queries read it (activities).
Handlers receive their collaborators through the container and return
Result types.

Structure:
- commands/: Command dataclasses and handlers
- queries/: Query dataclasses and handlers
- services/: Credential manager and the per-sync state machine
- dtos/: Sync outcome records returned by handlers
"""
