from __future__ import annotations


def metaforge_item(
    item_id: str,
    name: str,
    *,
    item_type: str = "Material",
    rarity: str = "Common",
    value: float = 10,
    weight: float = 0.5,
    updated_at: str = "2025-01-01T00:00:00Z",
    **extra: object,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": item_id,
        "name": name,
        "item_type": item_type,
        "rarity": rarity,
        "value": value,
        "stat_block": {"weight": weight},
        "icon": f"https://cdn.example.com/{item_id}.png",
        "updated_at": updated_at,
    }
    payload.update(extra)
    return payload


def battery_payload() -> dict[str, object]:
    return metaforge_item(
        "battery",
        "Battery",
        item_type="Refined Material",
        rarity="Uncommon",
        value=250,
        components=[
            {"quantity": 2, "component": {"id": "wires", "name": "Wires"}},
            {"quantity": 1, "component": {"id": "metal-parts", "name": "Metal Parts"}},
        ],
        recycle_components=[{"quantity": 3, "component": {"id": "wires", "name": "Wires"}}],
        recycle_from=[{"item": {"id": "old-radio", "name": "Old Radio"}}],
        used_in=[{"quantity": 1, "item": {"id": "power-cell", "name": "Power Cell"}}],
        sold_by=[{"trader_name": "Celeste", "price": 750}],
    )
