import uuid


def unique_external_id(prefix: str = "ext") -> str:
    """Identity-provider subject that no other test will reuse."""
    return f"{prefix}-{uuid.uuid4().hex}"


def property_values(**overrides) -> dict:
    values = {
        "title": "Bright room near campus",
        "description": "Sunny double room in a shared house, five minutes from the library.",
        "image_url": "https://img.example/room.jpg",
        "price": 650.0,
        "bedrooms": 1,
        "bathrooms": 1,
        "location": "12 College Road",
        "distance_to_campus": "0.4 km",
        "amenities": ["WiFi", "Furnished"],
        "available_from": "2026-09-01",
        "status": "ACTIVE",
    }
    values.update(overrides)
    return values
