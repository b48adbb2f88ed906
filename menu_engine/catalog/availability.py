from __future__ import annotations

from .models import AvailabilityBind, Channel, Snapshot


def _is_available(binds: list[AvailabilityBind], outlet_id: str, channel: Channel) -> bool:
    return any(b.outlet_id == outlet_id and b.channel == channel for b in binds)


def select_available(
    snapshot: Snapshot,
    outlet_id: str,
    channel: Channel | str,
    active_only: bool = True,
) -> Snapshot:
    """
    Restrict a snapshot to what one outlet sells through one channel.

    Categories and products are kept when they carry an availability bind
    for the pair (and, with ``active_only``, are active). Input order is
    preserved and the input snapshot is left untouched.
    """
    channel = Channel(channel)
    categories = [
        c
        for c in snapshot.categories
        if _is_available(c.availability_binds, outlet_id, channel)
        and (c.is_active or not active_only)
    ]
    products = [
        p
        for p in snapshot.products
        if _is_available(p.availability_binds, outlet_id, channel)
        and (p.is_active or not active_only)
    ]
    return Snapshot(categories=categories, products=products, tags=list(snapshot.tags))
