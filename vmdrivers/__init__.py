"""Driver binary reconciliation and raw disk provisioning for VM drivers."""

from __future__ import annotations

__version__ = '0.1.0'
