"""
Pickup Kernel

Transactional core for pickup-point receptions:
- One open reception per site, enforced with row locks
- Item ledger with last-in-first-out removal
- Paginated site -> reception -> item read model
"""

__version__ = "0.1.0"
