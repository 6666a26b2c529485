"""Full node installer (Python-first, state-driven).

Core design goals:
- State-driven and resumable provisioning
- Idempotent steps
- Architecture-aware downloads (amd64/arm64)
- Supervisor-managed upgrades
- Centralized logging
"""

__all__ = []
